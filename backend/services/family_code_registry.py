"""
Family Code Registry
Issues and rotates the lookup code that lets family members view an elderly
profile. One active code per profile; retired codes are not kept.
"""

import logging
import secrets
import string
from typing import Optional

from core.config import settings
from core.database import database
from core.errors import InvalidInput, StoreFailure
from db.models import family_code
from services.locks import elderly_locks

logger = logging.getLogger(__name__)

CODE_PREFIX = "YAO-"
CODE_LENGTH = 8
CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_code() -> str:
    """Generate a random family code, e.g. YAO-7K2M9QXA."""
    return CODE_PREFIX + "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


class FamilyCodeRegistry:
    """Family code persistence. Write methods expect the caller to hold the per-elderly lock."""

    @staticmethod
    async def resolve(elderly_id: int) -> Optional[str]:
        row = await database.fetch_one(
            family_code.select().where(family_code.c.elderly_id == elderly_id)
        )
        return row["code"] if row else None

    @staticmethod
    async def lookup(code: str) -> Optional[int]:
        """Return the elderly id bound to ``code``, if any."""
        if not code:
            return None
        row = await database.fetch_one(
            family_code.select().where(family_code.c.code == code.strip())
        )
        return row["elderly_id"] if row else None

    @staticmethod
    async def is_available(code: str, elderly_id: Optional[int] = None) -> bool:
        """True when ``code`` is unused or already belongs to ``elderly_id``."""
        owner = await FamilyCodeRegistry.lookup(code)
        return owner is None or owner == elderly_id

    @staticmethod
    async def mint_unique_code() -> str:
        """Generate a code that is not in use, retrying on collision."""
        for attempt in range(1, settings.FAMILY_CODE_MAX_ATTEMPTS + 1):
            code = generate_code()
            if await FamilyCodeRegistry.lookup(code) is None:
                return code
            logger.warning(f"Family code collision on attempt {attempt}")
        raise StoreFailure("Could not allocate a unique family code")

    @staticmethod
    async def rotate(elderly_id: int, explicit_code: Optional[str] = None) -> str:
        """Replace the profile's code with ``explicit_code`` or a freshly minted one."""
        code = explicit_code.strip() if explicit_code and explicit_code.strip() else None
        if code is None:
            code = await FamilyCodeRegistry.mint_unique_code()

        await database.execute(
            family_code.delete().where(family_code.c.elderly_id == elderly_id)
        )
        await database.execute(
            family_code.insert().values(elderly_id=elderly_id, code=code)
        )
        logger.info(f"Family code set for elderly {elderly_id}")
        return code

    @staticmethod
    async def reissue(elderly_id: int, explicit_code: Optional[str] = None) -> str:
        """Standalone rotation: validate, then rotate under the per-elderly lock in one transaction."""
        if explicit_code and explicit_code.strip():
            if not await FamilyCodeRegistry.is_available(explicit_code.strip(), elderly_id):
                raise InvalidInput("family code is already in use")

        async with elderly_locks.hold(elderly_id):
            async with database.transaction():
                return await FamilyCodeRegistry.rotate(elderly_id, explicit_code)
