from typing import Optional
from fastapi import Request

from core.config import settings
from core.errors import Unauthenticated


def read_caller_token(request: Request) -> Optional[str]:
    """Return the anonymous caller token carried by the request cookie, if any."""
    token = request.cookies.get(settings.CALLER_COOKIE_NAME)
    if token and token.strip():
        return token.strip()
    return None


async def get_current_caller(request: Request) -> str:
    """Dependency for routes that need a caller identity."""
    token = read_caller_token(request)
    if token is None:
        raise Unauthenticated(f"{settings.CALLER_COOKIE_NAME} is missing")
    return token
