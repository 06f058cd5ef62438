from typing import List

from schemas.base import BaseSchema
from schemas.elderly import ElderlyProfile
from schemas.medication_record import MedicationRecordResponse

class FamilyViewResponse(BaseSchema):
    """What a family member sees after entering the lookup code."""
    profile: ElderlyProfile
    records: List[MedicationRecordResponse]
    today: str  # YYYY-MM-DD in the service locale
    done_today: bool
