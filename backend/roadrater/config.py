"""
RoadRater Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types and ranges, and exposes a singleton `settings` object.
When:  Loaded once at import time. Invalid configuration terminates the
       process with exit status 1 after logging every offending field.

Database selection:
    DATABASE_URL wins when set. Otherwise the URL is assembled from
    DB_HOST / DB_PORT / POSTGRES_DB / POSTGRES_USER / POSTGRES_PASSWORD.
    Plain `postgres://` and `postgresql://` URLs are upgraded to the
    asyncpg driver so the async engine can use them directly.
"""

import logging
from typing import List, Literal, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)

ASYNC_POSTGRES_SCHEME = "postgresql+asyncpg"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field except JWT_SECRET has a development default.
    Attributes are grouped by concern.
    """

    # ── Runtime ───────────────────────────────────────────────────────────
    app_env: Literal["development", "test", "production"] = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, gt=0, le=65535)
    log_level: str = Field(default="INFO")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list of origins; "*" allows any origin.
    cors_origin: str = Field(default="http://localhost:3000")

    # ── Security ──────────────────────────────────────────────────────────
    jwt_secret: str = Field(min_length=10)

    # ── Database ──────────────────────────────────────────────────────────
    database_url: Optional[str] = Field(default=None)
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, gt=0, le=65535)
    postgres_db: str = Field(default="roadrater")
    postgres_user: str = Field(default="postgres")
    postgres_password: str = Field(default="")

    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # Creates missing tables on startup. Local bootstrap only; the schema is
    # otherwise managed outside this service.
    auto_create_schema: bool = Field(default=False)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits the comma-separated CORS_ORIGIN value, dropping blanks."""
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    @property
    def allow_any_origin(self) -> bool:
        return "*" in self.cors_origins_list

    @property
    def sqlalchemy_url(self) -> str:
        """
        What:  The async SQLAlchemy URL the persistence gateway connects with.
        How:   DATABASE_URL (driver-upgraded) or a URL built from the parts.
        """
        if self.database_url:
            url = self.database_url
            for prefix in ("postgres://", "postgresql://"):
                if url.startswith(prefix):
                    return f"{ASYNC_POSTGRES_SCHEME}://{url[len(prefix):]}"
            return url

        return URL.create(
            drivername=ASYNC_POSTGRES_SCHEME,
            username=self.postgres_user,
            password=self.postgres_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.postgres_db,
        ).render_as_string(hide_password=False)


def load_settings() -> Settings:
    """
    Build and validate settings, exiting the process on invalid configuration.

    Raises:
        SystemExit(1): when any field fails validation.
    """
    try:
        return Settings()
    except ValidationError as exc:
        logger.error("[config] Invalid environment configuration")
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "settings"
            logger.error("[config]   %s: %s", field.upper(), error["msg"])
        raise SystemExit(1) from exc


settings = load_settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
