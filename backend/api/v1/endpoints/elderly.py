"""
Elderly API Endpoints
Profile with medication plans, family code, and the derived reminder schedule
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Path, Query

from core.clock import now_local, to_local
from core.errors import AppError, NotFound, StoreFailure
from schemas.elderly import (
    ElderlyProfile,
    ElderlySaveRequest,
    FamilyCodeResponse,
    FamilyCodeRotateRequest,
)
from schemas.schedule import ScheduleResponse
from services.family_code_registry import FamilyCodeRegistry
from services.plan_store import PlanStore
from services.schedule_engine import active_window, derive_schedule

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{elderly_id}", response_model=ElderlyProfile)
async def get_elderly(elderly_id: int = Path(..., gt=0)):
    """
    Get an elderly profile with its plans, times and family code
    """
    try:
        return await PlanStore.get_profile(elderly_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching elderly {elderly_id}: {e}")
        raise StoreFailure("Failed to load elderly profile")


@router.post("", response_model=ElderlyProfile)
async def save_elderly(payload: ElderlySaveRequest):
    """
    Create or update a profile; the submitted plans replace all existing ones
    """
    try:
        logger.info(
            f"save_elderly(): id={payload.id!r}, plans={len(payload.plans)}, "
            f"explicit_code={'yes' if payload.family_code else 'no'}"
        )
        return await PlanStore.save_profile(
            payload.id, payload.name, payload.plans, payload.family_code
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error saving elderly profile: {e}")
        raise StoreFailure("Failed to save elderly profile")


@router.get("/{elderly_id}/family-code", response_model=FamilyCodeResponse)
async def get_family_code(elderly_id: int = Path(..., gt=0)):
    """
    Current family code, or null if none has been issued
    """
    try:
        if not await PlanStore.profile_exists(elderly_id):
            raise NotFound("elderly not found")
        code = await FamilyCodeRegistry.resolve(elderly_id)
        return FamilyCodeResponse(elderly_id=elderly_id, code=code)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching family code for elderly {elderly_id}: {e}")
        raise StoreFailure("Failed to load family code")


@router.post("/{elderly_id}/family-code", response_model=FamilyCodeResponse)
async def rotate_family_code(
    elderly_id: int = Path(..., gt=0),
    payload: Optional[FamilyCodeRotateRequest] = None,
):
    """
    Replace the family code with the supplied one or a freshly generated one
    """
    try:
        if not await PlanStore.profile_exists(elderly_id):
            raise NotFound("elderly not found")
        code = await FamilyCodeRegistry.reissue(elderly_id, payload.code if payload else None)
        return FamilyCodeResponse(elderly_id=elderly_id, code=code)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error rotating family code for elderly {elderly_id}: {e}")
        raise StoreFailure("Failed to rotate family code")


@router.get("/{elderly_id}/schedule", response_model=ScheduleResponse)
async def get_schedule(
    elderly_id: int = Path(..., gt=0),
    at: Optional[datetime] = Query(None, description="Evaluate the active window at this ISO datetime instead of now"),
):
    """
    Reminder windows derived from the plans, plus the window active right now
    """
    try:
        profile = await PlanStore.get_profile(elderly_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error loading schedule for elderly {elderly_id}: {e}")
        raise StoreFailure("Failed to load schedule")

    now = to_local(at) if at is not None else now_local()
    schedule = derive_schedule(profile.plans)
    return ScheduleResponse(
        elderly_id=elderly_id,
        now=now.isoformat(),
        schedule=schedule,
        active=active_window(schedule, now),
    )
