"""
Plan Store
Owns elderly profiles, their medication plans and per-plan times.

Saving a profile replaces the whole plan set: existing plans and times are
deleted and the submitted plans are inserted with fresh ids. Saves for the
same elderly id are serialized in-process and each save runs in a single
database transaction.
"""

import logging
from typing import Any, Dict, List, Optional

import sqlalchemy

from core.database import database
from core.errors import InvalidInput, NotFound
from db.models import elderly, medication_plan, medication_time
from schemas.elderly import ElderlyProfile, Medication, MedicationPlan, PlanPayload
from services.family_code_registry import FamilyCodeRegistry
from services.locks import elderly_locks
from services.schedule_engine import normalize_hhmm

logger = logging.getLogger(__name__)


def parse_elderly_id(raw: Any) -> Optional[int]:
    """
    Interpret the id sent with a save.

    Returns None (create a new profile) when the value is absent, non-numeric
    or zero. Negative ids cannot exist and are reported as not found.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    if value == 0:
        return None
    if value < 0:
        raise NotFound("elderly not found")
    return value


def is_persistable(plan: PlanPayload) -> bool:
    med = plan.medication
    return med is not None and bool(med.name) and med.quantity > 0


class PlanStore:
    """Service for reading and replacing an elderly profile's medication plans."""

    @staticmethod
    async def profile_exists(elderly_id: int) -> bool:
        row = await database.fetch_one(
            sqlalchemy.select(elderly.c.id).where(elderly.c.id == elderly_id)
        )
        return row is not None

    @staticmethod
    async def get_profile(elderly_id: int) -> ElderlyProfile:
        """
        Load a profile with its family code, plans (creation order) and each
        plan's times (creation order).

        Raises:
            NotFound: no profile with this id
        """
        row = await database.fetch_one(elderly.select().where(elderly.c.id == elderly_id))
        if row is None:
            raise NotFound("elderly not found")

        code = await FamilyCodeRegistry.resolve(elderly_id)

        plan_rows = await database.fetch_all(
            medication_plan.select()
            .where(medication_plan.c.elderly_id == elderly_id)
            .order_by(medication_plan.c.id.asc())
        )

        times_by_plan: Dict[int, List[str]] = {}
        plan_ids = [p["id"] for p in plan_rows]
        if plan_ids:
            time_rows = await database.fetch_all(
                medication_time.select()
                .where(medication_time.c.plan_id.in_(plan_ids))
                .order_by(medication_time.c.id.asc())
            )
            for t in time_rows:
                times_by_plan.setdefault(t["plan_id"], []).append(t["time_hhmm"])

        return ElderlyProfile(
            id=row["id"],
            name=row["name"],
            family_code=code,
            plans=[
                MedicationPlan(
                    id=p["id"],
                    medication=Medication(name=p["med_name"], quantity=p["quantity"], unit=p["unit"]),
                    times=times_by_plan.get(p["id"], []),
                    note=p["note"],
                )
                for p in plan_rows
            ],
        )

    @staticmethod
    async def save_profile(
        elderly_id: Any,
        name: Optional[str],
        plans: List[PlanPayload],
        explicit_code: Optional[str] = None,
    ) -> ElderlyProfile:
        """
        Create or rename a profile and replace its plans and family code.

        Plan entries without a medication name or with a non-positive quantity
        are skipped, as are malformed times. All checks run before the first write.

        Raises:
            InvalidInput: name missing or blank, or explicit code owned by another profile
            NotFound: a numeric id that does not exist
        """
        if name is None or not str(name).strip():
            raise InvalidInput("name is required")
        name = str(name).strip()

        target_id = parse_elderly_id(elderly_id)
        if target_id is not None and not await PlanStore.profile_exists(target_id):
            raise NotFound("elderly not found")

        code = explicit_code.strip() if explicit_code and explicit_code.strip() else None
        if code is not None and not await FamilyCodeRegistry.is_available(code, target_id):
            raise InvalidInput("family code is already in use")

        kept = [p for p in plans if is_persistable(p)]
        if len(kept) != len(plans):
            logger.info(f"Dropping {len(plans) - len(kept)} incomplete plan(s) from save")

        if target_id is None:
            async with database.transaction():
                target_id = await database.execute(elderly.insert().values(name=name))
                logger.info(f"Created elderly profile {target_id}")
                await PlanStore._replace_all(target_id, kept, code)
        else:
            async with elderly_locks.hold(target_id):
                async with database.transaction():
                    await database.execute(
                        elderly.update().where(elderly.c.id == target_id).values(name=name)
                    )
                    await PlanStore._replace_all(target_id, kept, code)

        return await PlanStore.get_profile(target_id)

    @staticmethod
    async def _replace_all(elderly_id: int, plans: List[PlanPayload], explicit_code: Optional[str]) -> None:
        # explicit > existing > freshly minted
        code = explicit_code or await FamilyCodeRegistry.resolve(elderly_id)
        await FamilyCodeRegistry.rotate(elderly_id, code)

        owned_plans = sqlalchemy.select(medication_plan.c.id).where(medication_plan.c.elderly_id == elderly_id)
        await database.execute(
            medication_time.delete().where(medication_time.c.plan_id.in_(owned_plans))
        )
        await database.execute(
            medication_plan.delete().where(medication_plan.c.elderly_id == elderly_id)
        )

        for plan in plans:
            med = plan.medication
            plan_id = await database.execute(
                medication_plan.insert().values(
                    elderly_id=elderly_id,
                    med_name=med.name,
                    quantity=med.quantity,
                    unit=med.unit,
                    note=plan.note,
                )
            )
            for raw in plan.times:
                hhmm = normalize_hhmm(raw)
                if hhmm is None:
                    continue
                await database.execute(
                    medication_time.insert().values(plan_id=plan_id, time_hhmm=hhmm)
                )

        logger.info(f"Replaced plans for elderly {elderly_id}: {len(plans)} plan(s)")
