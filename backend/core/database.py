import databases
import sqlalchemy
from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
import logging
from urllib.parse import urlparse
from core.config import settings

# Get logger
logger = logging.getLogger(__name__)

def log_database_config():
    """Log database configuration details for debugging."""
    try:
        parsed = urlparse(settings.DATABASE_URL)
        logger.info(f"Database scheme: {parsed.scheme}")
        logger.info(f"Database host: {parsed.hostname or 'local file'}")
        logger.info(f"Database path: {parsed.path}")
        logger.info(f"Database password: {'SET' if parsed.password else 'NOT_SET'}")
    except Exception as e:
        logger.error(f"Failed to parse DATABASE_URL: {e}")

def is_postgres_url(url: str) -> bool:
    return url.startswith("postgresql")

def database_options(url: str) -> dict:
    """Pool options are only understood by the asyncpg backend."""
    if not is_postgres_url(url):
        return {}
    return {
        "min_size": settings.DB_MIN_POOL_SIZE,
        "max_size": settings.DB_MAX_POOL_SIZE,
        "ssl": "prefer",
    }

log_database_config()

logger.info("Initializing database connection...")
try:
    database = databases.Database(
        settings.DATABASE_URL,
        **database_options(settings.DATABASE_URL)
    )
    logger.info("Database object created successfully")
except Exception as e:
    logger.error(f"Failed to create database object: {e}")
    logger.error(f"Exception type: {type(e).__name__}")
    raise

metadata = sqlalchemy.MetaData()

# SQLAlchemy engine for schema creation and non-async operations
engine_url = settings.DATABASE_URL.replace("+asyncpg", "").replace("+aiosqlite", "")
if is_postgres_url(engine_url):
    engine = create_engine(
        engine_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True
    )
else:
    engine = create_engine(engine_url, connect_args={"check_same_thread": False})

def create_tables() -> None:
    """Create any missing tables defined in db.models."""
    # Importing registers the tables on metadata
    import db.models  # noqa: F401
    logger.info("Creating missing tables...")
    metadata.create_all(engine)
    logger.info("Table creation complete")

def upsert(table):
    """Dialect insert supporting on_conflict_do_update for the configured database."""
    if is_postgres_url(settings.DATABASE_URL):
        return postgresql.insert(table)
    return sqlite.insert(table)
