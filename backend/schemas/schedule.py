from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum

class DayPeriod(str, Enum):
    morning = "上午"
    afternoon = "下午"
    evening = "晚上"

class ScheduledMedication(BaseModel):
    name: str
    quantity: float
    unit: Optional[str] = None
    note: Optional[str] = None

class ScheduleWindow(BaseModel):
    time: str  # HH:MM
    label: str  # e.g. "上午 08:00"
    medications: List[ScheduledMedication] = Field(default_factory=list)

class ScheduleResponse(BaseModel):
    elderly_id: int
    now: str  # ISO local datetime the active window was evaluated at
    schedule: List[ScheduleWindow]
    active: Optional[ScheduleWindow] = None
