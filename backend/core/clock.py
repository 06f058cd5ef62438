from datetime import date, datetime

import pytz

from core.config import settings


def local_timezone():
    return pytz.timezone(settings.TIMEZONE)


def now_local() -> datetime:
    """Current wall-clock time in the service locale, as a naive datetime."""
    return datetime.now(local_timezone()).replace(tzinfo=None)


def today_local() -> date:
    return now_local().date()


def to_local(value: datetime) -> datetime:
    """Convert an aware datetime to naive locale time; naive values are taken as already local."""
    if value.tzinfo is None:
        return value
    return value.astimezone(local_timezone()).replace(tzinfo=None)
