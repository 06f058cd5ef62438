"""
Medication Record API Endpoints
Daily adherence check-ins ("done" / "undone")
"""

import logging
from typing import List

from fastapi import APIRouter, Query, status

from core.clock import today_local
from core.errors import AppError, StoreFailure
from schemas.medication_record import (
    AdherenceTodayResponse,
    MedicationRecordCreate,
    MedicationRecordResponse,
    MedicationRecordStatusUpdate,
)
from services.adherence_ledger import AdherenceLedger, derive_done_for_day

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[MedicationRecordResponse])
async def list_records(elderly_id: int = Query(..., gt=0)):
    """
    All check-ins for a profile, newest first
    """
    try:
        return await AdherenceLedger.list_for(elderly_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching records for elderly {elderly_id}: {e}")
        raise StoreFailure("Failed to load medication records")


@router.post("", response_model=MedicationRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_record(payload: MedicationRecordCreate):
    """
    Append a check-in; existing records for the same day are left as they are
    """
    try:
        return await AdherenceLedger.record(payload.elderly_id, payload.record_date, payload.status)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error creating medication record: {e}")
        raise StoreFailure("Failed to create medication record")


@router.patch("", response_model=MedicationRecordResponse)
async def update_record_status(payload: MedicationRecordStatusUpdate):
    """
    Change the status of one existing record
    """
    try:
        return await AdherenceLedger.set_status(payload.id, payload.status)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error updating medication record {payload.id}: {e}")
        raise StoreFailure("Failed to update medication record")


@router.get("/today", response_model=AdherenceTodayResponse)
async def get_today(elderly_id: int = Query(..., gt=0)):
    """
    Whether medication counts as taken today: any "done" record for today wins
    """
    try:
        records = await AdherenceLedger.list_for(elderly_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching today's status for elderly {elderly_id}: {e}")
        raise StoreFailure("Failed to load medication records")

    today = today_local()
    return AdherenceTodayResponse(
        elderly_id=elderly_id,
        record_date=today.isoformat(),
        done=derive_done_for_day(records, today),
    )
