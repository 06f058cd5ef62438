"""
User API Endpoints
Anonymous caller identity and the caller's default elderly profile
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from core.config import settings
from core.errors import AppError, StoreFailure
from core.security import get_current_caller, read_caller_token
from schemas.user_settings import CallerResponse, UserSettingsResponse, UserSettingsUpdate
from services.user_binding import UserBinding, ensure_caller_id

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/me", response_model=CallerResponse)
async def get_me(request: Request, response: Response):
    """
    Return the caller token, minting one (and setting the cookie) on first visit
    """
    existing = read_caller_token(request)
    caller_id = ensure_caller_id(existing)
    if existing is None:
        response.set_cookie(
            key=settings.CALLER_COOKIE_NAME,
            value=caller_id,
            httponly=True,
            samesite="lax",
            path="/",
        )
        logger.info("Issued new caller token")
    return CallerResponse(user_id=caller_id)


@router.get("/settings", response_model=UserSettingsResponse)
async def get_settings(caller_id: str = Depends(get_current_caller)):
    """
    The caller's default elderly profile, or null
    """
    try:
        return await UserBinding.get_binding(caller_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching user settings: {e}")
        raise StoreFailure("Failed to load user settings")


@router.post("/settings", response_model=UserSettingsResponse)
async def save_settings(payload: UserSettingsUpdate, caller_id: str = Depends(get_current_caller)):
    """
    Bind the caller to a default elderly profile (insert or replace)
    """
    try:
        return await UserBinding.set_default(caller_id, payload.default_elderly_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error saving user settings: {e}")
        raise StoreFailure("Failed to save user settings")
