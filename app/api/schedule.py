import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends

from app.core.logger import logger
from app.core.security import verify_secret_token
from app.models.api_models import (
    DayScheduleResponse, PickerClickRequest, PickerResponse, PickerStateRequest, WeeklyGridResponse,
)
from app.models.db_models import DAYS, TIME_SLOTS, SeminarBooking, TimetableEntry
from app.services.booking_service import BookingService
from app.services.grid_service import build_weekly_grid, find_grid_conflicts
from app.services.slot_picker import SlotPicker, slot_statuses

router = APIRouter()
booking_service = BookingService()


def _grid_response(bookings) -> WeeklyGridResponse:
    conflicts = find_grid_conflicts(bookings)
    for conflict in conflicts:
        logger.warning(f"⚠️ Overlap on {conflict.day} {conflict.slot}: {', '.join(conflict.titles)} (last one shown)")
    return WeeklyGridResponse(
        days=DAYS,
        time_slots=TIME_SLOTS,
        grid=build_weekly_grid(bookings),
        conflicts=conflicts,
    )


# --- Weekly grid ---

@router.get("/schedule/grid", response_model=WeeklyGridResponse)
async def weekly_grid(location: Optional[str] = None, week_of: Optional[dt.date] = None):
    bookings = await booking_service.fetch_all_bookings_for_grid(location, week_of)
    return _grid_response(bookings)

@router.get("/timetable", response_model=WeeklyGridResponse)
async def class_timetable(course: str = "", year: str = "", division: str = ""):
    if not (course and year and division):
        # Nothing selected yet, the UI shows an empty grid
        return _grid_response([])
    bookings = await booking_service.fetch_timetable(course, year, division)
    return _grid_response(bookings)

@router.post("/timetable", dependencies=[Depends(verify_secret_token)])
async def create_timetable_entry(entry: TimetableEntry):
    return await booking_service.save_timetable_entry(entry)

@router.put("/timetable/{entry_id}", dependencies=[Depends(verify_secret_token)])
async def update_timetable_entry(entry_id: str, entry: TimetableEntry):
    return await booking_service.save_timetable_entry(entry, entry_id)

@router.delete("/timetable/{entry_id}", dependencies=[Depends(verify_secret_token)])
async def delete_timetable_entry(entry_id: str):
    await booking_service.delete_timetable_entry(entry_id)
    return {"success": True}


# --- Day view & slot picker ---

@router.get("/schedule/day", response_model=DayScheduleResponse)
async def day_schedule(date: dt.date, location: str = "seminar"):
    bookings = await booking_service.fetch_bookings_for_day(date, location)
    return DayScheduleResponse(date=date, location=location, slots=slot_statuses(bookings))

async def _day_statuses(date: Optional[dt.date], location: str):
    if date is None:
        return slot_statuses([])
    return slot_statuses(await booking_service.fetch_bookings_for_day(date, location))

@router.post("/picker/click", response_model=PickerResponse)
async def picker_click(req: PickerClickRequest):
    picker = SlotPicker.from_statuses(req.date, await _day_statuses(req.date, req.location), req.state)
    return picker.click(req.slot)

@router.post("/picker/confirm", response_model=PickerResponse)
async def picker_confirm(req: PickerStateRequest):
    picker = SlotPicker.from_statuses(req.date, await _day_statuses(req.date, req.location), req.state)
    result = picker.confirm()
    if result.window:
        logger.info(f"🗓️ Slot picked for {req.location}: {result.window.date} {result.window.start}-{result.window.end}")
    return result

@router.post("/picker/clear", response_model=PickerResponse)
async def picker_clear(req: PickerStateRequest):
    return SlotPicker(req.date, booked=[], state=req.state).clear()


# --- Seminar hall ---

@router.get("/seminar-bookings", response_model=List[SeminarBooking])
async def seminar_bookings():
    return await booking_service.list_seminar_bookings()

@router.post("/seminar-bookings", dependencies=[Depends(verify_secret_token)])
async def create_seminar_booking(booking: SeminarBooking):
    return await booking_service.create_seminar_booking(booking)
