from functools import lru_cache
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings

LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}

class Settings(BaseSettings):

    database_url: str = Field(
        default="sqlite+aiosqlite:///./db/file_structure.db",
        description="Database connection URL"
    )
    db_echo: bool = Field(default=False, description="Echo SQL queries")
    db_busy_timeout: float = Field(
        default=5.0,
        description="Seconds to wait on a locked database before giving up"
    )
    db_connect_retries: int = Field(
        default=30,
        description="Connection attempts made while waiting for the database"
    )
    db_retry_delay: float = Field(
        default=2.0,
        description="Delay in seconds between connection attempts"
    )

    access_token: Optional[str] = Field(
        default=None,
        description="Shared bearer token accepted by the access guard"
    )

    default_file_color: str = Field(default="#000000", description="Color of new files")
    default_comment_color: str = Field(default="#FFD700", description="Color of new comments")
    notifier_queue_size: int = Field(
        default=100,
        description="Pending change events kept per subscriber"
    )

    log_level: str = Field(default="WARNING", description="Logging level")

    @validator("database_url")
    def validate_database_url(cls, v: str) -> str:

        if not v.strip():
            raise ValueError("Database URL must not be empty")
        return v

    @validator("log_level")
    def validate_log_level(cls, v: str) -> str:

        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

@lru_cache()
def get_settings() -> Settings:

    return Settings()
