"""
Health Check Endpoints
Monitor database connectivity
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from core.database import database
from core.logging import logger

router = APIRouter()

@router.get("/health")
async def health_check():
    """
    Basic health check endpoint
    """
    return {"status": "healthy", "message": "Service is running"}

@router.get("/health/db")
async def database_health_check():
    """
    Database connectivity health check
    """
    try:
        result = await database.fetch_val("SELECT 1")
        if result == 1:
            return {
                "status": "healthy",
                "database": "connected",
                "message": "Database connection is working"
            }
        logger.error(f"Database health check returned {result!r}")
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
    return JSONResponse(
        status_code=503,
        content={"error": "store_failure", "message": "Database connection failed"},
    )
