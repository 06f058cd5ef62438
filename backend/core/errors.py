"""
Error taxonomy shared by services and endpoints.

Every failure reaching a client is rendered as
``{"error": <stable code>, "message": <human readable text>}``.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    code = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(AppError):
    """Malformed or missing required field. Never retried."""
    code = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(AppError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Unauthenticated(AppError):
    """Caller identity missing where one is required."""
    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class StoreFailure(AppError):
    """The underlying persistence call failed."""
    code = "store_failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(code: str, message: str) -> dict:
    return {"error": code, "message": message}


async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, StoreFailure):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Report the first offending field only; pydantic internals stay server side
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field or 'request'} is invalid"
    else:
        message = "request is invalid"
    logger.info(f"{request.method} {request.url.path} -> invalid_input: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(InvalidInput.code, message),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
