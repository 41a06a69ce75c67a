import asyncio
import datetime as dt
from typing import List, Optional
from zoneinfo import ZoneInfo

from pydantic import ValidationError as ModelValidationError

from app.core.config import settings
from app.core.config_loader import get_campus_config, get_locations, location_aliases
from app.core.exceptions import BookingConflictError, NotFoundError, ValidationError
from app.core.logger import logger
from app.models.db_models import (
    CLOSING_TIME, Booking, DatedBooking, EventProposal, RecurringBooking, SeminarBooking, TimetableEntry,
)
from app.services.db_service import db_service, EVENTS, SEMINAR_BOOKINGS, TIMETABLES, EVENT_REQUESTS
from app.services.notification_service import send_email, get_notification_config
from app.services.slot_picker import add_hour, to_hours

TZ = ZoneInfo(settings.CAMPUS_TIMEZONE)

SEMINAR_HALL_ID = "seminar"
SEMINAR_HALL = "Seminar Hall"
ALL_DAY = ("08:00", CLOSING_TIME)
PLACEHOLDER_IMAGE = "https://placehold.co/600x400.png"


def normalize_event(row: dict) -> Optional[DatedBooking]:
    if not row.get('location'):
        return None
    time = row.get('time')
    if time:
        start, end = time, row.get('endTime') or f"{int(time.split(':')[0]) + 1:02d}:00"
        kind = "Event"
    else:
        start, end = ALL_DAY
        kind = "Event (All Day)"
    return DatedBooking(
        id=row.get('id'),
        title=row.get('title', ''),
        organizer=row.get('organizer', ''),
        location=row['location'],
        date=row['date'],
        start_time=start,
        end_time=end,
        type=kind,
    )


def normalize_seminar_booking(row: dict) -> DatedBooking:
    return DatedBooking(
        id=row.get('id'),
        title=row.get('title', ''),
        organizer=row.get('organizer', ''),
        location=SEMINAR_HALL,
        date=row['date'],
        start_time=row['startTime'],
        end_time=row.get('endTime') or None,
        type="Booking",
    )


def normalize_lecture(row: dict, day: dt.date) -> Optional[DatedBooking]:
    """A weekly timetable row projected onto a concrete date."""
    if not row.get('location'):
        return None
    return DatedBooking(
        id=row.get('id'),
        title=f"{row.get('subject', '')} ({row.get('course', '')} {row.get('year', '')}-{row.get('division', '')})",
        organizer=row.get('facultyName', ''),
        location=row['location'],
        date=day,
        start_time=row['startTime'],
        end_time=row.get('endTime') or None,
        type="Lecture",
    )


def _safe(normalizer, row: dict, *args):
    """Rows with a broken shape (bad time format, missing date) are dropped with a warning."""
    try:
        return normalizer(row, *args)
    except (KeyError, ValueError, ModelValidationError) as e:
        logger.warning(f"⚠️ Skipping malformed row {row.get('id')}: {e}")
        return None


def overlaps(a: Booking, b: Booking) -> bool:
    a_start = to_hours(a.start_time)
    a_end = to_hours(a.end_time) if a.end_time else a_start + 1
    b_start = to_hours(b.start_time)
    b_end = to_hours(b.end_time) if b.end_time else b_start + 1
    return a_start < b_end and b_start < a_end


class BookingService:
    def __init__(self):
        self.config = get_campus_config()
        self.locations = get_locations(self.config)

    def _filter_location(self, bookings: List[Booking], location_id: Optional[str]) -> List[Booking]:
        if not location_id:
            return bookings
        aliases = location_aliases(self.config, location_id)
        return [b for b in bookings if b.location in aliases]

    # --- Reads ---

    async def fetch_bookings_for_day(self, day: dt.date, location_id: str) -> List[DatedBooking]:
        """
        Everything occupying a room on one date: events, seminar hall bookings and
        the lectures that recur on that weekday.
        """
        day_str = day.isoformat()
        weekday = day.isoweekday()
        logger.info(f"🔍 Fetching schedule for {location_id} on {day_str}")

        # Timetables only run Monday to Saturday
        timetable_query = db_service.list_timetable(day_of_week=weekday) if weekday < 7 else asyncio.sleep(0, result=[])

        events, seminar_rows, lectures = await asyncio.gather(
            db_service.list_events_on(day_str),
            db_service.list_seminar_bookings(day=day_str),
            timetable_query,
        )

        bookings = [_safe(normalize_event, row) for row in events]
        bookings += [_safe(normalize_seminar_booking, row) for row in seminar_rows]
        bookings += [_safe(normalize_lecture, row, day) for row in lectures]

        return self._filter_location([b for b in bookings if b is not None], location_id)

    async def fetch_all_bookings_for_grid(self, location_id: Optional[str] = None,
                                          week_of: Optional[dt.date] = None) -> List[Booking]:
        """
        Weekly timetable entries plus the one-off events and seminar bookings
        that fall in the week (Monday to Sunday) containing `week_of`.
        """
        week_of = week_of or dt.datetime.now(TZ).date()
        week_start = week_of - dt.timedelta(days=week_of.weekday())
        week_end = week_start + dt.timedelta(days=6)
        from_day = week_start.isoformat()

        timetable_rows, events, seminar_rows = await asyncio.gather(
            db_service.list_timetable(),
            db_service.list_upcoming_events(from_day),
            db_service.list_seminar_bookings(from_day=from_day),
        )

        bookings: List[Booking] = []
        for row in timetable_rows:
            entry = _safe(TimetableEntry.model_validate, row)
            if entry is not None:
                bookings.append(entry.to_booking())

        dated = [_safe(normalize_event, row) for row in events]
        dated += [_safe(normalize_seminar_booking, row) for row in seminar_rows]
        bookings += [b for b in dated if b is not None and week_start <= b.date <= week_end]

        return self._filter_location(bookings, location_id)

    async def fetch_timetable(self, course: str, year: str, division: str) -> List[RecurringBooking]:
        rows = await db_service.list_timetable(course=course, year=year, division=division)
        entries = [_safe(TimetableEntry.model_validate, row) for row in rows]
        return [entry.to_booking() for entry in entries if entry is not None]

    async def list_seminar_bookings(self) -> List[SeminarBooking]:
        """Newest date first, earliest start first within a day."""
        rows = await db_service.list_seminar_bookings()
        bookings = [_safe(SeminarBooking.model_validate, row) for row in rows]
        bookings = [b for b in bookings if b is not None]
        bookings.sort(key=lambda b: b.start_time)
        bookings.sort(key=lambda b: b.date, reverse=True)
        return bookings

    # --- Writes ---

    async def check_room_free(self, candidate: DatedBooking, location_id: str):
        """
        Raises BookingConflictError when the room already has something overlapping.
        Read-then-write, so two simultaneous requests can still both pass.
        """
        existing = await self.fetch_bookings_for_day(candidate.date, location_id)
        clashes = [b for b in existing if overlaps(candidate, b)]
        if clashes:
            titles = ", ".join(b.title for b in clashes)
            logger.warning(f"⛔ Booking '{candidate.title}' on {candidate.date} clashes with: {titles}")
            raise BookingConflictError(
                "The selected time overlaps an existing booking",
                detail=f"Already booked: {titles}",
            )

    def _validate_seminar_booking(self, booking: SeminarBooking) -> DatedBooking:
        missing = [name for name in ("title", "organizer", "date", "start_time", "end_time") if not getattr(booking, name)]
        if missing:
            raise ValidationError("Please fill all required fields.", detail=f"Missing: {', '.join(missing)}")
        try:
            candidate = DatedBooking(
                title=booking.title,
                organizer=booking.organizer,
                location=SEMINAR_HALL,
                date=booking.date,
                start_time=booking.start_time,
                end_time=booking.end_time,
            )
        except ModelValidationError as e:
            raise ValidationError("Invalid date or time format. Use YYYY-MM-DD and HH:MM.", detail=str(e))
        if to_hours(candidate.start_time) >= to_hours(candidate.end_time):
            raise ValidationError("Start time must be before end time.")
        return candidate

    async def create_seminar_booking(self, booking: SeminarBooking) -> dict:
        candidate = self._validate_seminar_booking(booking)
        await self.check_room_free(candidate, SEMINAR_HALL_ID)

        logger.info(f"📥 Seminar hall booking: {booking.title} on {booking.date} {booking.start_time}-{booking.end_time}")
        created = await db_service.insert(
            SEMINAR_BOOKINGS,
            booking.model_dump(by_alias=True, exclude={"id"}, exclude_none=True),
        )
        await self.send_booking_notification(candidate)
        return created

    async def save_timetable_entry(self, entry: TimetableEntry, entry_id: Optional[str] = None) -> dict:
        missing = [name for name in ("subject", "course", "year", "division") if not getattr(entry, name)]
        if missing:
            raise ValidationError("Please select a class and fill in the subject.", detail=f"Missing: {', '.join(missing)}")
        if not 1 <= entry.day_of_week <= 6:
            raise ValidationError("Timetable entries run Monday (1) to Saturday (6).")
        if not entry.end_time or to_hours(entry.start_time) >= to_hours(entry.end_time):
            raise ValidationError("Start time must be before end time.")

        document = entry.model_dump(by_alias=True, exclude={"id"})
        document['location'] = entry.location or SEMINAR_HALL

        if entry_id:
            updated = await db_service.update(TIMETABLES, entry_id, document)
            if updated is None:
                raise NotFoundError(f"Timetable entry {entry_id} not found")
            return updated
        return await db_service.insert(TIMETABLES, document)

    async def delete_timetable_entry(self, entry_id: str):
        if not await db_service.delete(TIMETABLES, entry_id):
            raise NotFoundError(f"Timetable entry {entry_id} not found")

    async def _load_proposal(self, proposal_id: str) -> EventProposal:
        row = await db_service.get_proposal(proposal_id)
        if row is None:
            raise NotFoundError(f"Event proposal {proposal_id} not found")
        return EventProposal.model_validate(row)

    async def approve_proposal(self, proposal_id: str) -> dict:
        """
        Publishes the proposal as an event. A Seminar Hall proposal also books
        the hall for one hour from its start time (noon when unset).
        """
        proposal = await self._load_proposal(proposal_id)
        if proposal.status == "approved":
            raise ValidationError("This proposal has already been approved.")

        start = proposal.time or "12:00"
        hall_booking = None
        if proposal.location == SEMINAR_HALL_ID:
            hall_booking = SeminarBooking(
                title=proposal.title,
                organizer=proposal.club_name,
                date=proposal.date,
                start_time=start,
                end_time=add_hour(start),
            )
            await self.check_room_free(self._validate_seminar_booking(hall_booking), SEMINAR_HALL_ID)

        description = proposal.description
        event = await db_service.insert(EVENTS, {
            'title': proposal.title,
            'description': description[:100] + ('...' if len(description) > 100 else ''),
            'longDescription': description,
            'date': proposal.date,
            'time': start,
            'location': proposal.location,
            'organizer': proposal.club_name,
            'category': proposal.category,
            'image': PLACEHOLDER_IMAGE,
            'attendees': 0,
            'capacity': 100,
            'registrationLink': proposal.registration_link or '#',
            'status': 'upcoming',
            'gallery': [],
            'targetAudience': proposal.target_audience,
            'keySpeakers': proposal.key_speakers,
            'equipmentNeeds': proposal.equipment_needs,
            'budgetDetails': proposal.budget_details,
            'whatYouWillLearn': proposal.what_you_will_learn,
        })

        if hall_booking is not None:
            await db_service.insert(SEMINAR_BOOKINGS, hall_booking.model_dump(by_alias=True, exclude={"id"}, exclude_none=True))
            logger.info(f"🎪 Seminar hall reserved for '{proposal.title}' on {proposal.date} at {start}")

        await db_service.update(EVENT_REQUESTS, proposal_id, {
            'status': 'approved',
            'approvedAt': dt.datetime.now(TZ).isoformat(),
        })
        logger.info(f"✅ Proposal {proposal_id} approved")

        await self.send_approval_notification(proposal, event.get('id'))
        return event

    async def reject_proposal(self, proposal_id: str, reason: str):
        if not reason or not reason.strip():
            raise ValidationError("Rejection reason cannot be empty.")
        await self._load_proposal(proposal_id)
        await db_service.update(EVENT_REQUESTS, proposal_id, {
            'status': 'rejected',
            'rejectionReason': reason.strip(),
            'rejectedAt': dt.datetime.now(TZ).isoformat(),
        })
        logger.info(f"🚫 Proposal {proposal_id} rejected")

    # --- Notifications ---

    async def send_booking_notification(self, booking: DatedBooking):
        notifications = get_notification_config()
        try:
            subject = notifications.get("booking_subject", "Seminar Hall booked: {title}").format(title=booking.title)
            body = notifications.get("booking_template", "{title} on {date} {start}-{end}").format(
                title=booking.title,
                organizer=booking.organizer,
                location=booking.location,
                date=booking.date.isoformat(),
                start=booking.start_time,
                end=booking.end_time,
            )
            await asyncio.to_thread(send_email, subject, body)
        except Exception as e:
            logger.error(f"❌ Error formatting/sending booking email: {e}")

    async def send_approval_notification(self, proposal: EventProposal, event_id: Optional[str]):
        if not proposal.creator_email:
            return
        notifications = get_notification_config()
        location = self.locations.get(proposal.location, proposal.location)
        url = f"{settings.PUBLIC_BASE_URL}/dashboard/events/{event_id or ''}"
        try:
            subject = notifications.get("approval_subject", "Your event was approved").format(title=proposal.title)
            body = notifications.get("approval_template", "{title} was approved: {url}").format(
                title=proposal.title,
                date=proposal.date,
                location=location,
                url=url,
            )
            await asyncio.to_thread(send_email, subject, body, proposal.creator_email)
        except Exception as e:
            logger.error(f"❌ Error formatting/sending approval email: {e}")
