import datetime as dt
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
TIME_SLOTS = [f"{hour:02d}:00" for hour in range(8, 18)]
CLOSING_TIME = "18:00"

TIME_PATTERN = r"^\d{2}:\d{2}$"


class BookingBase(BaseModel):
    # Store rows are camelCase, Python code uses snake_case; both are accepted
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: Optional[str] = Field(default=None)
    title: str
    organizer: str = ""
    location: str = ""
    start_time: str = Field(alias="startTime", pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, alias="endTime", pattern=TIME_PATTERN)


class RecurringBooking(BookingBase):
    """Weekly slot (timetable lecture), 1=Monday .. 7=Sunday."""
    kind: Literal["recurring"] = "recurring"
    day_of_week: int = Field(alias="dayOfWeek")

    def weekday(self) -> int:
        return self.day_of_week


class DatedBooking(BookingBase):
    """One-off booking on a calendar date (event, seminar hall booking)."""
    kind: Literal["dated"] = "dated"
    date: dt.date
    type: str = "Booking"

    def weekday(self) -> int:
        return self.date.isoweekday()


Booking = Annotated[Union[RecurringBooking, DatedBooking], Field(discriminator="kind")]


class MergedCell(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking: Booking
    is_first_hour: bool = Field(alias="isFirstHour")
    # Row span at the first cell, 0 on continuation cells
    total_hours: int = Field(alias="totalHours")


# --- Stored documents ---

class TimetableEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: Optional[str] = Field(default=None)
    course: str = ""
    year: str = ""
    division: str = ""
    subject: str = ""
    faculty_name: str = Field(default="", alias="facultyName")
    location: str = "Seminar Hall"
    day_of_week: int = Field(alias="dayOfWeek")
    start_time: str = Field(alias="startTime", pattern=TIME_PATTERN)
    end_time: str = Field(default="", alias="endTime")

    def to_booking(self) -> RecurringBooking:
        return RecurringBooking(
            id=self.id,
            title=self.subject,
            organizer=self.faculty_name,
            location=self.location,
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time or None,
        )


class SeminarBooking(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: Optional[str] = Field(default=None)
    title: str = ""
    organizer: str = ""
    date: str = ""
    start_time: str = Field(default="", alias="startTime")
    end_time: str = Field(default="", alias="endTime")
    approved_by: Optional[str] = Field(default=None, alias="approvedBy")


class EventProposal(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="allow")

    id: str
    title: str
    description: str = ""
    location: str = ""
    category: str = ""
    registration_link: Optional[str] = Field(default=None, alias="registrationLink")
    club_name: str = Field(default="", alias="clubName")
    date: str = ""
    time: Optional[str] = None
    status: str = "pending"
    creator_email: str = Field(default="", alias="creatorEmail")
    target_audience: List[str] = Field(default_factory=list, alias="targetAudience")
    key_speakers: Optional[str] = Field(default=None, alias="keySpeakers")
    equipment_needs: Optional[str] = Field(default=None, alias="equipmentNeeds")
    budget_details: Optional[str] = Field(default=None, alias="budgetDetails")
    what_you_will_learn: Optional[str] = Field(default=None, alias="whatYouWillLearn")
