import time
from fastapi import Request

from core.logging import logger, get_request_logger

request_logger = get_request_logger()

async def request_logging_middleware(request: Request, call_next):
    """Log method, path, status and duration of each request to the request log."""
    started = time.perf_counter()
    client = request.client.host if request.client else "unknown"
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Unhandled error for {request.method} {request.url.path} from {client}: {type(e).__name__}: {e}")
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    request_logger.info(
        f"{client} {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
    )
    return response

async def add_no_cache_headers(request: Request, call_next):
    """Add no-cache headers to API responses."""
    response = await call_next(request)
    if str(request.url.path).startswith("/api/"):
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
    return response
