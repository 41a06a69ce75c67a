from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from app.models.db_models import DAYS, TIME_SLOTS, CLOSING_TIME, Booking, MergedCell

Grid = Dict[str, Dict[str, Optional[MergedCell]]]


class GridConflict(BaseModel):
    day: str
    slot: str
    titles: List[str]


def empty_grid(days: Sequence[str] = DAYS, time_slots: Sequence[str] = TIME_SLOTS) -> Grid:
    return {day: {slot: None for slot in time_slots} for day in days}


def _resolve_day(booking: Booking, days: Sequence[str]) -> Optional[str]:
    index = booking.weekday() - 1
    if 0 <= index < len(days):
        return days[index]
    return None


def _span(booking: Booking, time_slots: Sequence[str]):
    """
    Returns (start_index, end_index, total_hours) or None if the start time
    is not one of the fixed slots.
    A missing or unknown end time means a one-hour booking.
    """
    if booking.start_time not in time_slots:
        return None
    start_index = time_slots.index(booking.start_time)

    if booking.end_time and booking.end_time in time_slots:
        end_index = time_slots.index(booking.end_time)
    elif booking.end_time == CLOSING_TIME:
        end_index = len(time_slots)
    else:
        end_index = start_index + 1

    total_hours = max(1, end_index - start_index)
    return start_index, end_index, total_hours


def build_weekly_grid(
    bookings: Sequence[Booking],
    days: Sequence[str] = DAYS,
    time_slots: Sequence[str] = TIME_SLOTS,
) -> Grid:
    """
    Lays bookings onto the day x hour grid.

    The first hour of a booking carries is_first_hour=True and the span length,
    the following hours are continuation cells (total_hours=0) that the renderer
    skips. Bookings on an unknown day or starting outside the slot set are dropped.
    Overlapping bookings are last-write-wins; use find_grid_conflicts to see them.
    """
    grid = empty_grid(days, time_slots)

    for booking in bookings:
        day = _resolve_day(booking, days)
        if day is None:
            continue
        span = _span(booking, time_slots)
        if span is None:
            continue
        start_index, end_index, total_hours = span

        for i in range(start_index, min(end_index, len(time_slots))):
            slot = time_slots[i]
            if i == start_index:
                grid[day][slot] = MergedCell(booking=booking, is_first_hour=True, total_hours=total_hours)
            else:
                grid[day][slot] = MergedCell(booking=booking, is_first_hour=False, total_hours=0)

    return grid


def find_grid_conflicts(
    bookings: Sequence[Booking],
    days: Sequence[str] = DAYS,
    time_slots: Sequence[str] = TIME_SLOTS,
) -> List[GridConflict]:
    """Every (day, slot) claimed by more than one booking, in grid order."""
    claims = defaultdict(list)

    for booking in bookings:
        day = _resolve_day(booking, days)
        span = _span(booking, time_slots) if day else None
        if span is None:
            continue
        start_index, end_index, _ = span
        for i in range(start_index, min(end_index, len(time_slots))):
            claims[(day, time_slots[i])].append(booking.title)

    conflicts = []
    for day in days:
        for slot in time_slots:
            titles = claims.get((day, slot), [])
            if len(titles) > 1:
                conflicts.append(GridConflict(day=day, slot=slot, titles=titles))
    return conflicts


def slot_label(index: int, time_slots: Sequence[str] = TIME_SLOTS) -> str:
    """'08:00 - 09:00'; the last slot closes at 18:00."""
    end = time_slots[index + 1] if index + 1 < len(time_slots) else CLOSING_TIME
    return f"{time_slots[index]} - {end}"


def grid_to_rows(
    grid: Grid,
    days: Sequence[str] = DAYS,
    time_slots: Sequence[str] = TIME_SLOTS,
) -> List[Dict[str, str]]:
    """
    One row per time slot for table rendering. First cells show the booking,
    continuation cells show a vertical bar so a span stays readable without row-span.
    """
    rows = []
    for index, slot in enumerate(time_slots):
        row = {"Time": slot_label(index, time_slots)}
        for day in days:
            cell = grid.get(day, {}).get(slot)
            if cell is None:
                row[day] = ""
            elif cell.is_first_hour:
                text = cell.booking.title
                if cell.booking.organizer:
                    text += f" ({cell.booking.organizer})"
                if cell.total_hours > 1:
                    text += f" [{cell.total_hours}h]"
                row[day] = text
            else:
                row[day] = "│"
        rows.append(row)
    return rows
