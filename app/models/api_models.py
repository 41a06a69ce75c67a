import datetime as dt
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional

from app.models.db_models import MergedCell
from app.services.grid_service import GridConflict
from app.services.slot_picker import Notice, SelectionState, SlotStatus, BookingWindow

# --- Requests ---

class PickerClickRequest(BaseModel):
    date: Optional[dt.date] = None
    location: str = "seminar"
    slot: str
    state: SelectionState = Field(default_factory=SelectionState)

class PickerStateRequest(BaseModel):
    date: Optional[dt.date] = None
    location: str = "seminar"
    state: SelectionState = Field(default_factory=SelectionState)

class RejectProposalRequest(BaseModel):
    reason: str = ""

# --- Responses ---

class WeeklyGridResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    days: List[str]
    time_slots: List[str] = Field(alias="timeSlots")
    grid: Dict[str, Dict[str, Optional[MergedCell]]]
    conflicts: List[GridConflict] = Field(default_factory=list)

class DayScheduleResponse(BaseModel):
    date: dt.date
    location: str
    slots: List[SlotStatus]

class PickerResponse(BaseModel):
    state: SelectionState
    notice: Optional[Notice] = None
    window: Optional[BookingWindow] = None
