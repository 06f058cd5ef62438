"""
User Default Binding
Maps an anonymous caller token to the elderly profile it administers.
"""

import logging
import uuid
from typing import Any, Optional

from core.clock import now_local
from core.database import database, upsert
from core.errors import InvalidInput, NotFound, Unauthenticated
from db.models import user_settings
from schemas.user_settings import UserSettingsResponse
from services.plan_store import PlanStore

logger = logging.getLogger(__name__)


def ensure_caller_id(existing: Optional[str] = None) -> str:
    """Return the caller's existing token, or mint a new one."""
    if existing and existing.strip():
        return existing.strip()
    return str(uuid.uuid4())


def parse_default_elderly_id(raw: Any) -> int:
    """Accept a positive integer or its decimal string form."""
    if raw is None or isinstance(raw, bool):
        raise InvalidInput("default_elderly_id is invalid")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise InvalidInput("default_elderly_id is invalid")
        raw = int(raw)
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise InvalidInput("default_elderly_id is invalid")
    if value <= 0:
        raise InvalidInput("default_elderly_id is invalid")
    return value


def _iso(value) -> Optional[str]:
    if value is None:
        return None
    try:
        return value.isoformat()
    except AttributeError:
        return str(value)


def _require_caller(caller_id: Optional[str]) -> str:
    if not caller_id:
        raise Unauthenticated("user_id is missing")
    return caller_id


class UserBinding:
    """Service for caller -> default elderly bindings."""

    @staticmethod
    async def get_binding(caller_id: str) -> UserSettingsResponse:
        caller_id = _require_caller(caller_id)
        row = await database.fetch_one(
            user_settings.select().where(user_settings.c.user_id == caller_id)
        )
        if row is None:
            return UserSettingsResponse(user_id=caller_id, default_elderly_id=None)
        return UserSettingsResponse(
            user_id=caller_id,
            default_elderly_id=row["default_elderly_id"],
            updated_at=_iso(row["updated_at"]),
        )

    @staticmethod
    async def get_default(caller_id: str) -> Optional[int]:
        binding = await UserBinding.get_binding(caller_id)
        return binding.default_elderly_id

    @staticmethod
    async def set_default(caller_id: str, elderly_id: Any) -> UserSettingsResponse:
        """
        Insert or replace the caller's binding.

        Raises:
            Unauthenticated: no caller token
            InvalidInput: elderly id missing or not a positive integer
            NotFound: the elderly profile does not exist
        """
        caller_id = _require_caller(caller_id)
        elderly_id = parse_default_elderly_id(elderly_id)
        if not await PlanStore.profile_exists(elderly_id):
            raise NotFound("elderly not found")

        now = now_local()
        statement = upsert(user_settings).values(
            user_id=caller_id, default_elderly_id=elderly_id, updated_at=now
        )
        await database.execute(
            statement.on_conflict_do_update(
                index_elements=[user_settings.c.user_id],
                set_={"default_elderly_id": elderly_id, "updated_at": now},
            )
        )

        logger.info(f"Caller {caller_id[:8]}... bound to elderly {elderly_id}")
        return await UserBinding.get_binding(caller_id)
