import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from urllib.parse import quote_plus

load_dotenv()

class Settings(BaseSettings):
    """
    Application settings.
    """

    # Application
    PROJECT_NAME: str = "Yaobao API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Medication plan and adherence tracking for elderly family members"
    API_V1_STR: str = "/api/v1"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
        "http://localhost",
    ]

    # Database
    DB_USER: str = os.getenv("DB_USER", "")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    DB_NAME: str = os.getenv("DB_NAME", "yaobao")
    # A full URL (e.g. sqlite:///./yaobao.db) takes precedence over the DB_* parts
    DATABASE_URI: Optional[str] = os.getenv("DATABASE_URL")
    DB_MIN_POOL_SIZE: int = int(os.getenv("DB_MIN_POOL_SIZE", "2"))
    DB_MAX_POOL_SIZE: int = int(os.getenv("DB_MAX_POOL_SIZE", "10"))
    AUTO_CREATE_TABLES: bool = os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true"

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URI:
            return self.DATABASE_URI
        # URL-encode the username and password to handle special characters
        encoded_user = quote_plus(self.DB_USER)
        encoded_password = quote_plus(self.DB_PASSWORD)
        return f"postgresql+asyncpg://{encoded_user}:{encoded_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Locale: every wall-clock value (record_time, "today", log timestamps) uses this zone
    TIMEZONE: str = os.getenv("TIMEZONE", "Asia/Shanghai")

    # Anonymous caller identity
    CALLER_COOKIE_NAME: str = os.getenv("CALLER_COOKIE_NAME", "user_id")

    # Family codes
    FAMILY_CODE_MAX_ATTEMPTS: int = int(os.getenv("FAMILY_CODE_MAX_ATTEMPTS", "5"))

    # Logging
    LOG_DIRECTORY: str = os.getenv("LOG_DIRECTORY", "logs")

    class Config:
        case_sensitive = True
        env_file = ".env"
        extra = "ignore"

settings = Settings()
