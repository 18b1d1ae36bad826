import os

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load .env for local dev; deployments use real environment variables
load_dotenv(override=False)


def _bool(name: str, default: bool) -> bool:
    """
    Helper to parse boolean environment variables.
    Accepts: 1, true, yes, on (case-insensitive).
    """
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


def _norm_db_url(url: str | None) -> str | None:
    """
    Normalize database URL to use async drivers for SQLAlchemy.

    Ensures ``postgres`` URLs use ``asyncpg`` and plain ``sqlite`` URLs use
    ``aiosqlite``. URLs already specifying an async driver are returned as-is.
    """
    if not url:
        return None
    if url.startswith("postgres://"):
        url = "postgresql+asyncpg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://") :]
    if url.startswith("sqlite://"):
        url = "sqlite+aiosqlite://" + url[len("sqlite://") :]
    return url


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables.
    Uses pydantic for validation and parsing.
    """

    DATABASE_URL: str = Field(..., description="Database URL")
    WEBAPP_URL: str = Field("http://localhost:5173", description="Web app origin for CORS")
    HOST: str = Field("0.0.0.0", description="API bind address")
    PORT: int = Field(8080, description="API port")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    ALERT_WEBHOOK_URL: str | None = Field(None, description="Webhook receiving error logs")

    # Feature flags
    FF_SEED_DEFAULTS: bool = Field(
        default_factory=lambda: _bool("FF_SEED_DEFAULTS", True),
        description="Seed default exercises and templates for new users",
    )
    FF_ERROR_ALERTS: bool = Field(
        default_factory=lambda: _bool("FF_ERROR_ALERTS", True),
        description="Forward error logs to ALERT_WEBHOOK_URL",
    )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL environment variable is required")
        return _norm_db_url(v)

    @field_validator("LOG_LEVEL")
    @classmethod
    def log_level_upper(cls, v):
        return v.strip().upper()


SETTINGS = Config()  # pyright: ignore[reportCallIssue]
