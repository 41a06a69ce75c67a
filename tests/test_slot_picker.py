import datetime as dt

import pytest
from pydantic import ValidationError

from app.core.exceptions import InvalidSlotError
from app.models.db_models import TIME_SLOTS, DatedBooking
from app.services.slot_picker import (
    NoticeCode, SelectionState, SelectionStatus, SlotPicker, slot_statuses,
)

DAY = dt.date(2024, 3, 4)


def picker(*booked_slots):
    return SlotPicker(DAY, [TIME_SLOTS.index(slot) for slot in booked_slots])


def test_slot_statuses_use_interval_overlap():
    bookings = [
        DatedBooking(title="Guest Lecture", location="Seminar Hall", date=DAY, start_time="10:30", end_time="12:00"),
        DatedBooking(title="Club Meet", location="Seminar Hall", date=DAY, start_time="15:00"),
    ]
    statuses = {s.slot: s for s in slot_statuses(bookings)}

    assert statuses["10:00"].booked and statuses["10:00"].booked_by == "Guest Lecture"
    assert statuses["11:00"].booked
    assert not statuses["12:00"].booked
    assert statuses["15:00"].booked
    assert not statuses["16:00"].booked
    assert not statuses["09:00"].booked


def test_two_free_clicks_confirm_a_range():
    p = picker()
    assert p.click("10:00").state.status == SelectionStatus.ANCHOR_SET
    result = p.click("12:00")

    assert result.notice is None
    assert result.state == SelectionState(status=SelectionStatus.RANGE_CONFIRMED, start=2, end=4)

    window = p.confirm().window
    assert (window.start, window.end, window.date) == ("10:00", "13:00", "2024-03-04")


def test_range_is_ordered_when_clicked_backwards():
    p = picker()
    p.click("15:00")
    result = p.click("13:00")
    assert (result.state.start, result.state.end) == (5, 7)


def test_range_over_booked_slot_is_rejected():
    p = picker("11:00")
    p.click("10:00")
    result = p.click("12:00")

    assert result.state.status == SelectionStatus.EMPTY
    assert result.notice.code == NoticeCode.CONFLICT
    assert p.confirm().notice.code == NoticeCode.NO_SELECTION


def test_single_slot_confirm_is_one_hour():
    p = picker()
    p.click("14:00")
    result = p.confirm()

    assert result.notice is None
    assert result.window.start == "14:00"
    assert result.window.end == "15:00"
    assert result.state.status == SelectionStatus.EMPTY


def test_last_slot_ends_at_closing():
    p = picker()
    p.click("17:00")
    assert p.confirm().window.end == "18:00"


def test_confirm_without_selection_emits_nothing():
    result = picker().confirm()
    assert result.window is None
    assert result.notice.code == NoticeCode.NO_SELECTION


def test_no_date_is_rejected_without_state_change():
    p = SlotPicker(None, [])
    click = p.click("10:00")
    assert click.notice.code == NoticeCode.NO_DATE
    assert click.state.status == SelectionStatus.EMPTY

    anchored = SlotPicker(None, [], SelectionState(status=SelectionStatus.ANCHOR_SET, anchor=1))
    confirm = anchored.confirm()
    assert confirm.notice.code == NoticeCode.NO_DATE
    assert confirm.window is None
    assert confirm.state.anchor == 1


@pytest.mark.parametrize("state", [
    SelectionState(),
    SelectionState(status=SelectionStatus.ANCHOR_SET, anchor=0),
    SelectionState(status=SelectionStatus.RANGE_CONFIRMED, start=0, end=1),
])
def test_clicking_booked_slot_is_a_no_op(state):
    p = SlotPicker(DAY, [TIME_SLOTS.index("13:00")], state)
    result = p.click("13:00")
    assert result.state == state
    assert result.notice is None


def test_click_after_confirmed_range_restarts_selection():
    p = SlotPicker(DAY, [], SelectionState(status=SelectionStatus.RANGE_CONFIRMED, start=0, end=2))
    result = p.click("16:00")
    assert result.state == SelectionState(status=SelectionStatus.ANCHOR_SET, anchor=8)


def test_clear_resets_without_emitting():
    p = picker()
    p.click("09:00")
    result = p.clear()
    assert result.state.status == SelectionStatus.EMPTY
    assert result.window is None


def test_unknown_slot_raises():
    with pytest.raises(InvalidSlotError):
        picker().click("07:00")


def test_confirm_rejects_range_booked_since_selection():
    stale = SelectionState(status=SelectionStatus.RANGE_CONFIRMED, start=2, end=4)
    result = SlotPicker(DAY, [TIME_SLOTS.index("11:00")], stale).confirm()

    assert result.window is None
    assert result.notice.code == NoticeCode.CONFLICT
    assert result.state.status == SelectionStatus.EMPTY


def test_confirm_rejects_booked_anchor():
    stale = SelectionState(status=SelectionStatus.ANCHOR_SET, anchor=TIME_SLOTS.index("11:00"))
    result = SlotPicker(DAY, [TIME_SLOTS.index("11:00")], stale).confirm()
    assert result.notice.code == NoticeCode.CONFLICT


@pytest.mark.parametrize("fields", [
    {"status": "anchor_set", "anchor": -1},
    {"status": "anchor_set", "anchor": len(TIME_SLOTS)},
    {"status": "anchor_set"},
    {"status": "range_confirmed", "start": 2, "end": 40},
    {"status": "range_confirmed", "start": 2},
    {"status": "range_confirmed", "start": 5, "end": 2},
])
def test_selection_state_rejects_inconsistent_fields(fields):
    with pytest.raises(ValidationError):
        SelectionState(**fields)
