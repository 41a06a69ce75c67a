import datetime as dt

from app.models.db_models import TIME_SLOTS, DatedBooking, RecurringBooking
from app.services.grid_service import build_weekly_grid, find_grid_conflicts, grid_to_rows, slot_label


def lecture(title, day, start, end=None):
    return RecurringBooking(title=title, organizer="Prof. Rao", location="Lab 401",
                            day_of_week=day, start_time=start, end_time=end)


def test_multi_hour_booking_is_merged():
    grid = build_weekly_grid([lecture("Data Structures", 1, "10:00", "13:00")])

    first = grid["Monday"]["10:00"]
    assert first.is_first_hour is True
    assert first.total_hours == 3
    for slot in ("11:00", "12:00"):
        assert grid["Monday"][slot].is_first_hour is False
        assert grid["Monday"][slot].total_hours == 0
    assert grid["Monday"]["09:00"] is None
    assert grid["Monday"]["13:00"] is None


def test_every_valid_span_has_one_first_cell_and_continuations():
    for start_index, start in enumerate(TIME_SLOTS):
        for end_index in range(start_index + 1, len(TIME_SLOTS)):
            grid = build_weekly_grid([lecture("DBMS", 2, start, TIME_SLOTS[end_index])])
            cells = [(slot, grid["Tuesday"][slot]) for slot in TIME_SLOTS if grid["Tuesday"][slot]]
            total = end_index - start_index

            assert [slot for slot, cell in cells if cell.is_first_hour] == [start]
            assert cells[0][1].total_hours == total
            assert [slot for slot, cell in cells[1:]] == TIME_SLOTS[start_index + 1:end_index]
            assert all(cell.total_hours == 0 for _, cell in cells[1:])


def test_missing_end_time_is_one_hour():
    grid = build_weekly_grid([lecture("Seminar", 3, "14:00")])
    assert grid["Wednesday"]["14:00"].total_hours == 1
    assert grid["Wednesday"]["15:00"] is None


def test_unknown_end_time_is_one_hour():
    grid = build_weekly_grid([lecture("Lab", 3, "09:00", "09:30")])
    assert grid["Wednesday"]["09:00"].total_hours == 1
    assert grid["Wednesday"]["10:00"] is None


def test_booking_until_closing_time_fills_last_slot():
    grid = build_weekly_grid([lecture("Evening Lab", 5, "16:00", "18:00")])
    assert grid["Friday"]["16:00"].total_hours == 2
    assert grid["Friday"]["17:00"].is_first_hour is False


def test_unresolvable_day_and_start_are_dropped():
    grid = build_weekly_grid([
        lecture("Sunday class", 7, "10:00", "11:00"),
        lecture("Zero day", 0, "10:00", "11:00"),
        lecture("Too early", 1, "07:00", "09:00"),
    ])
    assert all(cell is None for day in grid.values() for cell in day.values())


def test_overlap_is_last_write_wins():
    first = lecture("Operating Systems", 4, "10:00", "12:00")
    second = lecture("Networks", 4, "11:00", "12:00")

    grid = build_weekly_grid([first, second])

    assert grid["Thursday"]["10:00"].booking.title == "Operating Systems"
    assert grid["Thursday"]["11:00"].booking.title == "Networks"
    assert grid["Thursday"]["11:00"].is_first_hour is True


def test_conflicts_are_reported():
    conflicts = find_grid_conflicts([
        lecture("Operating Systems", 4, "10:00", "12:00"),
        lecture("Networks", 4, "11:00", "12:00"),
        lecture("Maths", 4, "12:00", "13:00"),
    ])
    assert len(conflicts) == 1
    assert conflicts[0].day == "Thursday"
    assert conflicts[0].slot == "11:00"
    assert conflicts[0].titles == ["Operating Systems", "Networks"]


def test_dated_booking_lands_on_its_weekday():
    booking = DatedBooking(title="Hackathon", organizer="Coding Club", location="Seminar Hall",
                           date=dt.date(2024, 1, 3), start_time="09:00", end_time="11:00")
    grid = build_weekly_grid([booking])
    assert grid["Wednesday"]["09:00"].total_hours == 2


def test_grid_rows_for_table_rendering():
    grid = build_weekly_grid([lecture("Data Structures", 1, "10:00", "12:00")])
    rows = grid_to_rows(grid)

    assert len(rows) == len(TIME_SLOTS)
    assert rows[0]["Time"] == "08:00 - 09:00"
    assert rows[-1]["Time"] == "17:00 - 18:00"
    assert rows[2]["Monday"] == "Data Structures (Prof. Rao) [2h]"
    assert rows[3]["Monday"] == "│"
    assert rows[2]["Tuesday"] == ""
    assert slot_label(9) == "17:00 - 18:00"
