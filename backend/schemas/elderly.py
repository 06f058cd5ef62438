from typing import Any, List, Optional, Union
from pydantic import Field, validator

from schemas.base import BaseSchema

# --- Save payload ---
# Plan entries are deliberately permissive: malformed entries are dropped by
# the plan store instead of failing the whole save.

class MedicationPayload(BaseSchema):
    name: str = ""
    quantity: float = 0
    unit: Optional[str] = None

    @validator('name', pre=True)
    def coerce_name(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @validator('quantity', pre=True)
    def coerce_quantity(cls, v):
        try:
            return float(v)
        except (TypeError, ValueError):
            return 0

    @validator('unit', pre=True)
    def coerce_unit(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

class PlanPayload(BaseSchema):
    id: Optional[Any] = None  # client-side id, ignored on save
    medication: Optional[MedicationPayload] = None
    times: List[str] = Field(default_factory=list, description="Times of day in HH:MM")
    note: Optional[str] = None

    @validator('medication', pre=True)
    def coerce_medication(cls, v):
        return v if isinstance(v, dict) else None

    @validator('times', pre=True)
    def coerce_times(cls, v):
        if not isinstance(v, list):
            return []
        return [str(t).strip() for t in v if t is not None]

    @validator('note', pre=True)
    def coerce_note(cls, v):
        if v is None:
            return None
        return str(v)

class ElderlySaveRequest(BaseSchema):
    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    plans: List[PlanPayload] = Field(default_factory=list)
    family_code: Optional[str] = Field(None, alias="familyCode")

    @validator('plans', pre=True)
    def coerce_plans(cls, v):
        if not isinstance(v, list):
            return []
        return [p for p in v if isinstance(p, dict)]

# --- Responses ---

class Medication(BaseSchema):
    name: str
    quantity: float
    unit: Optional[str] = None

class MedicationPlan(BaseSchema):
    id: int
    medication: Medication
    times: List[str] = Field(default_factory=list)
    note: Optional[str] = None

class ElderlyProfile(BaseSchema):
    id: int
    name: str
    family_code: Optional[str] = Field(None, alias="familyCode")
    plans: List[MedicationPlan] = Field(default_factory=list)

class FamilyCodeRotateRequest(BaseSchema):
    code: Optional[str] = None

class FamilyCodeResponse(BaseSchema):
    elderly_id: int
    code: Optional[str] = None
