from typing import Optional
from pydantic import AliasChoices, Field

from schemas.base import BaseSchema

RECORD_STATUSES = ("done", "undone")

class MedicationRecordCreate(BaseSchema):
    elderly_id: Optional[int] = Field(None, validation_alias=AliasChoices("elderly_id", "elderlyId"))
    record_date: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("record_date", "recordDate"),
        description="Date string in YYYY-MM-DD format",
    )
    status: Optional[str] = None

class MedicationRecordStatusUpdate(BaseSchema):
    id: Optional[int] = None
    status: Optional[str] = None

class MedicationRecordResponse(BaseSchema):
    id: int
    elderly_id: int
    record_date: str  # YYYY-MM-DD
    status: str
    created_at: str
    created_time: Optional[str] = None  # MM/DD HH:MM, for display
    record_time: Optional[str] = None  # HH:MM in the service locale

class AdherenceTodayResponse(BaseSchema):
    elderly_id: int
    record_date: str
    done: bool
