"""
Adherence Ledger
Append-oriented store of daily check-ins. Same-day records are never merged;
"done for the day" is derived by callers with derive_done_for_day().
"""

import logging
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from core.clock import now_local
from core.database import database
from core.errors import InvalidInput, NotFound
from db.models import medication_record
from schemas.medication_record import RECORD_STATUSES, MedicationRecordResponse
from services.plan_store import PlanStore

logger = logging.getLogger(__name__)


def parse_record_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput("record_date is invalid. Use YYYY-MM-DD")


def validate_status(status: Optional[str]) -> str:
    if status not in RECORD_STATUSES:
        raise InvalidInput("status must be one of: done, undone")
    return status


def _as_date_str(value) -> str:
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]


def _as_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def serialize_record(row) -> MedicationRecordResponse:
    """Normalize a DB row to the response schema (dates as strings, display time added)."""
    record = dict(row)
    created = _as_datetime(record.get("created_at"))
    return MedicationRecordResponse(
        id=record["id"],
        elderly_id=record["elderly_id"],
        record_date=_as_date_str(record["record_date"]),
        status=record["status"],
        created_at=created.isoformat() if created else str(record.get("created_at")),
        created_time=created.strftime("%m/%d %H:%M") if created else None,
        record_time=record.get("record_time"),
    )


def derive_done_for_day(records: Iterable[MedicationRecordResponse], day: date) -> bool:
    """True iff any record on ``day`` says done. A later undone never retracts it."""
    wanted = _as_date_str(day)
    return any(r.record_date == wanted and r.status == "done" for r in records)


class AdherenceLedger:
    """Service for medication check-in records."""

    @staticmethod
    async def record(elderly_id: Optional[int], record_date: Any, status: Optional[str]) -> MedicationRecordResponse:
        """
        Append a check-in. Does not look at other records for the same day.

        Raises:
            InvalidInput: missing elderly id or date, bad date, or unknown status
            NotFound: the elderly profile does not exist
        """
        if not elderly_id or not record_date:
            raise InvalidInput("elderly_id and record_date are required")
        if elderly_id < 0:
            raise InvalidInput("elderly_id is invalid")
        day = parse_record_date(record_date)
        status = validate_status(status)

        if not await PlanStore.profile_exists(elderly_id):
            raise NotFound("elderly not found")

        now = now_local()
        record_id = await database.execute(
            medication_record.insert().values(
                elderly_id=elderly_id,
                record_date=day,
                status=status,
                created_at=now,
                record_time=now.strftime("%H:%M"),
            )
        )
        logger.info(f"Recorded '{status}' for elderly {elderly_id} on {day} (record {record_id})")
        return await AdherenceLedger.get(record_id)

    @staticmethod
    async def get(record_id: int) -> MedicationRecordResponse:
        row = await database.fetch_one(
            medication_record.select().where(medication_record.c.id == record_id)
        )
        if row is None:
            raise NotFound("record not found")
        return serialize_record(row)

    @staticmethod
    async def set_status(record_id: Optional[int], status: Optional[str]) -> MedicationRecordResponse:
        """
        Update one record's status in place.

        Raises:
            InvalidInput: missing id or unknown status
            NotFound: no record with this id
        """
        if not record_id:
            raise InvalidInput("id is required")
        status = validate_status(status)

        existing = await database.fetch_one(
            medication_record.select().where(medication_record.c.id == record_id)
        )
        if existing is None:
            raise NotFound("record not found")

        await database.execute(
            medication_record.update()
            .where(medication_record.c.id == record_id)
            .values(status=status)
        )
        logger.info(f"Record {record_id} status set to '{status}'")
        return await AdherenceLedger.get(record_id)

    @staticmethod
    async def list_for(elderly_id: int) -> List[MedicationRecordResponse]:
        """All records for the profile, most recent first."""
        rows = await database.fetch_all(
            medication_record.select()
            .where(medication_record.c.elderly_id == elderly_id)
            .order_by(medication_record.c.created_at.desc(), medication_record.c.id.desc())
        )
        return [serialize_record(r) for r in rows]
