# Initialize logging first, before other imports
from core.logging import setup_logging
setup_logging()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from core.config import settings
from core.database import database, create_tables
from core.errors import register_error_handlers
from core.logging import log_exception
from core.middleware import add_no_cache_headers, request_logging_middleware
from api.v1.api import api_router

# Get logger
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan event handler."""
    logger.info("=== APPLICATION STARTUP ===")

    if settings.AUTO_CREATE_TABLES:
        with log_exception(__name__):
            create_tables()

    logger.info("Attempting to connect to database...")
    try:
        await database.connect()
        logger.info("Database connection successful!")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        logger.error(f"Exception type: {type(e).__name__}")
        raise

    logger.info("=== APPLICATION STARTUP COMPLETE ===")
    yield

    logger.info("=== APPLICATION SHUTDOWN ===")
    try:
        await database.disconnect()
        logger.info("Database disconnected successfully")
    except Exception as e:
        logger.error(f"Error disconnecting database: {e}")

    logger.info("=== APPLICATION SHUTDOWN COMPLETE ===")

def create_app() -> FastAPI:
    """Create FastAPI application with all configurations."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan
    )

    register_error_handlers(app)

    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(add_no_cache_headers)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
