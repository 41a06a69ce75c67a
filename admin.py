import asyncio
import datetime as dt

import streamlit as st
import pandas as pd

from app.core.config_loader import get_campus_config, get_locations
from app.models.db_models import DAYS, TIME_SLOTS
from app.services.booking_service import BookingService
from app.services.db_service import db_service
from app.services.grid_service import build_weekly_grid, find_grid_conflicts, grid_to_rows

# Page Config
st.set_page_config(
    page_title="CampusConnect Admin",
    page_icon="📅",
    layout="wide"
)

st.title("CampusConnect - Weekly Room Schedule")

locations = get_locations(get_campus_config())

def load_grid(location_id, week_of):
    # Each rerun gets a fresh event loop, the async client must not outlive it
    db_service.reset()
    bookings = asyncio.run(BookingService().fetch_all_bookings_for_grid(location_id, week_of))
    grid = build_weekly_grid(bookings)
    return pd.DataFrame(grid_to_rows(grid), columns=["Time", *DAYS]), find_grid_conflicts(bookings), len(bookings)

col1, col2 = st.columns(2)
location_id = col1.selectbox(
    "Location",
    options=["", *locations.keys()],
    format_func=lambda key: locations.get(key, "All locations"),
)
week_of = col2.date_input("Week of", value=dt.date.today())

if st.button("Refresh"):
    st.rerun()

df, conflicts, total = load_grid(location_id or None, week_of)

if total:
    m1, m2 = st.columns(2)
    m1.metric("Bookings this week", total)
    m2.metric("Overlapping slots", len(conflicts))

    st.subheader("Timetable")
    st.dataframe(df, use_container_width=True, hide_index=True, height=38 * (len(TIME_SLOTS) + 1))

    if conflicts:
        st.subheader("Overlaps")
        st.warning("These slots are claimed by more than one booking; the grid shows the last one.")
        st.table(pd.DataFrame([
            {"Day": c.day, "Slot": c.slot, "Bookings": ", ".join(c.titles)} for c in conflicts
        ]))
else:
    st.info("No bookings for this selection.")

st.markdown("---")
st.caption("CampusConnect • Seminar Hall & Lab Scheduling")
