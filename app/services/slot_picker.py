import datetime as dt
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.exceptions import InvalidSlotError
from app.core.logger import logger
from app.models.db_models import TIME_SLOTS, Booking


class SelectionStatus(str, Enum):
    EMPTY = "empty"
    ANCHOR_SET = "anchor_set"
    RANGE_CONFIRMED = "range_confirmed"


class NoticeCode(str, Enum):
    CONFLICT = "conflict"
    NO_DATE = "no_date"
    NO_SELECTION = "no_selection"


NOTICE_MESSAGES = {
    NoticeCode.CONFLICT: "Conflict detected: the selected range includes a booked slot. Please choose a different range.",
    NoticeCode.NO_DATE: "Please select a date first.",
    NoticeCode.NO_SELECTION: "Please select a time slot before confirming.",
}


class Notice(BaseModel):
    code: NoticeCode
    message: str

    @classmethod
    def of(cls, code: NoticeCode) -> "Notice":
        return cls(code=code, message=NOTICE_MESSAGES[code])


class SelectionState(BaseModel):
    """Two-click range selection. Indices point into TIME_SLOTS."""
    model_config = ConfigDict(frozen=True)

    status: SelectionStatus = SelectionStatus.EMPTY
    anchor: Optional[int] = Field(default=None, ge=0, lt=len(TIME_SLOTS))
    start: Optional[int] = Field(default=None, ge=0, lt=len(TIME_SLOTS))
    end: Optional[int] = Field(default=None, ge=0, lt=len(TIME_SLOTS))

    @model_validator(mode="after")
    def check_status_fields(self):
        if self.status == SelectionStatus.ANCHOR_SET and self.anchor is None:
            raise ValueError("anchor_set requires an anchor")
        if self.status == SelectionStatus.RANGE_CONFIRMED:
            if self.start is None or self.end is None:
                raise ValueError("range_confirmed requires start and end")
            if self.start > self.end:
                raise ValueError("range start must not be after its end")
        return self


class SlotStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slot: str
    booked: bool
    booked_by: Optional[str] = Field(default=None, alias="bookedBy")


class BookingWindow(BaseModel):
    start: str
    end: str
    date: str


class PickerResult(BaseModel):
    state: SelectionState
    notice: Optional[Notice] = None
    window: Optional[BookingWindow] = None


def to_hours(value: str) -> float:
    """'10:30' -> 10.5"""
    hours, minutes = value.split(":")
    return int(hours) + int(minutes) / 60


def add_hour(value: str) -> str:
    hours, minutes = value.split(":")
    return f"{int(hours) + 1:02d}:{minutes}"


def slot_statuses(bookings: Sequence[Booking], time_slots: Sequence[str] = TIME_SLOTS) -> List[SlotStatus]:
    """
    Marks each hourly slot booked when it overlaps a booking:
    slot_start < booking_end and slot_end > booking_start.
    """
    statuses = []
    for slot in time_slots:
        slot_start = to_hours(slot)
        slot_end = slot_start + 1
        booked_by = None
        for booking in bookings:
            booking_start = to_hours(booking.start_time)
            booking_end = to_hours(booking.end_time) if booking.end_time else booking_start + 1
            if slot_start < booking_end and slot_end > booking_start:
                booked_by = booking.title
                break
        statuses.append(SlotStatus(slot=slot, booked=booked_by is not None, booked_by=booked_by))
    return statuses


class SlotPicker:
    """
    Holds the selection for one date/room. The state is ephemeral: the caller
    passes back whatever the previous call returned.
    """

    def __init__(
        self,
        date: Optional[dt.date],
        booked: Iterable[int],
        state: Optional[SelectionState] = None,
        time_slots: Sequence[str] = TIME_SLOTS,
    ):
        self.date = date
        self.booked = set(booked)
        self.state = state or SelectionState()
        self.time_slots = list(time_slots)

    @classmethod
    def from_statuses(cls, date: Optional[dt.date], statuses: Sequence[SlotStatus], state: Optional[SelectionState] = None) -> "SlotPicker":
        booked = [i for i, status in enumerate(statuses) if status.booked]
        return cls(date, booked, state, [status.slot for status in statuses])

    def _index(self, slot: str) -> int:
        if slot not in self.time_slots:
            raise InvalidSlotError(f"Unknown time slot '{slot}'", detail=f"Expected one of {', '.join(self.time_slots)}")
        return self.time_slots.index(slot)

    def _result(self, notice: Optional[NoticeCode] = None, window: Optional[BookingWindow] = None) -> PickerResult:
        return PickerResult(state=self.state, notice=Notice.of(notice) if notice else None, window=window)

    def click(self, slot: str) -> PickerResult:
        index = self._index(slot)

        if self.date is None:
            return self._result(NoticeCode.NO_DATE)

        if index in self.booked:
            return self._result()

        if self.state.status == SelectionStatus.ANCHOR_SET and self.state.anchor is not None:
            low, high = sorted((self.state.anchor, index))
            if any(i in self.booked for i in range(low, high + 1)):
                logger.info(f"⚠️ Range {self.time_slots[low]}-{self.time_slots[high]} on {self.date} crosses a booked slot")
                self.state = SelectionState()
                return self._result(NoticeCode.CONFLICT)
            self.state = SelectionState(status=SelectionStatus.RANGE_CONFIRMED, start=low, end=high)
            return self._result()

        # Empty or RangeConfirmed: this click starts a new selection
        self.state = SelectionState(status=SelectionStatus.ANCHOR_SET, anchor=index)
        return self._result()

    def selected_range(self) -> Optional[tuple]:
        if self.state.status == SelectionStatus.RANGE_CONFIRMED:
            return self.state.start, self.state.end
        if self.state.status == SelectionStatus.ANCHOR_SET:
            return self.state.anchor, self.state.anchor
        return None

    def confirm(self) -> PickerResult:
        if self.date is None:
            return self._result(NoticeCode.NO_DATE)

        selected = self.selected_range()
        if selected is None or None in selected:
            return self._result(NoticeCode.NO_SELECTION)

        start, end = selected
        # The state comes back from the caller, bookings may have landed since
        if any(i in self.booked for i in range(start, end + 1)):
            logger.info(f"⚠️ Confirm of {self.time_slots[start]}-{self.time_slots[end]} on {self.date} crosses a booked slot")
            self.state = SelectionState()
            return self._result(NoticeCode.CONFLICT)

        window = BookingWindow(
            start=self.time_slots[start],
            end=add_hour(self.time_slots[end]),
            date=self.date.strftime("%Y-%m-%d"),
        )
        self.state = SelectionState()
        return self._result(window=window)

    def clear(self) -> PickerResult:
        self.state = SelectionState()
        return self._result()
