from fastapi import APIRouter

from core.clock import today_local
from core.errors import AppError, NotFound, StoreFailure
from core.logging import logger
from schemas.family import FamilyViewResponse
from services.adherence_ledger import AdherenceLedger, derive_done_for_day
from services.family_code_registry import FamilyCodeRegistry
from services.plan_store import PlanStore

router = APIRouter()

@router.get("/{code}", response_model=FamilyViewResponse)
async def get_family_view(code: str):
    """
    Read-only view for family members holding the lookup code: the profile,
    its check-in history and whether medication was taken today.
    """
    try:
        elderly_id = await FamilyCodeRegistry.lookup(code)
        if elderly_id is None:
            raise NotFound("family code not found")

        profile = await PlanStore.get_profile(elderly_id)
        records = await AdherenceLedger.list_for(elderly_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error loading family view: {e}")
        raise StoreFailure("Failed to load family view")

    today = today_local()
    return FamilyViewResponse(
        profile=profile,
        records=records,
        today=today.isoformat(),
        done_today=derive_done_for_day(records, today),
    )
