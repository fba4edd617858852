"""Configuration management for seodesk.

This module provides configuration with environment variable support,
validation, and type safety using Pydantic Settings.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SeodeskConfig(BaseSettings):
    """Main configuration for seodesk.

    All settings can be configured via environment variables with the
    ``SEODESK_`` prefix.  Supports .env file loading for local development.

    Example:
        ```python
        # SEODESK_DATABASE_URL=postgresql+asyncpg://...
        # SEODESK_SESSION_SECRET=...
        config = SeodeskConfig()

        # Or programmatically
        config = SeodeskConfig(
            database_url="sqlite+aiosqlite:///./seodesk.db",
            session_secret="change-me-change-me-change-me-change-me",
        )
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="SEODESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __str__(self) -> str:
        """String representation with masked secrets."""
        result = super().__repr__()
        result = re.sub(r"://([^:]+):([^@]+)@", r"://\1:***@", result)
        result = re.sub(
            r"(session_secret|secret|password)=(?:'[^']*'|[^\s,)]+)",
            r"\1='***'",
            result,
            flags=re.IGNORECASE,
        )
        return result

    ##########################
    # Database Configuration #
    ##########################

    database_url: str = Field(
        ...,
        description="Async SQLAlchemy database URL (required)",
    )

    database_pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Database connection pool size",
    )

    database_max_overflow: int = Field(
        default=20,
        ge=0,
        le=200,
        description="Max overflow connections beyond pool size",
    )

    database_echo: bool = Field(
        default=False,
        description="Enable SQL query logging (use only in development)",
    )

    #########################
    # Session Configuration #
    #########################

    session_secret: str = Field(
        ...,
        description="Secret used to sign session tokens (required, >= 32 chars)",
    )

    session_algorithm: str = Field(
        default="HS256",
        description="Session token signing algorithm",
    )

    session_cookie_name: str = Field(
        default="seodesk_session",
        description="Name of the session cookie",
    )

    session_max_age: int = Field(
        default=60 * 60 * 24 * 7,
        ge=60,
        description="Session lifetime in seconds (one week by default)",
    )

    session_cookie_secure: bool = Field(
        default=False,
        description="Mark the session cookie Secure (enable behind HTTPS)",
    )

    session_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Where server-side session records live",
    )

    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL (required for the redis session backend)",
    )

    #############
    # Dashboard #
    #############

    upcoming_days_default: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Default window for /api/tasks/upcoming",
    )

    deadline_window_days: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Dashboard upcoming-deadline window in days",
    )

    recent_activity_limit: int = Field(default=5, ge=1, le=100)
    recent_clients_limit: int = Field(default=4, ge=1, le=100)
    upcoming_deadlines_limit: int = Field(default=5, ge=1, le=100)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Level applied to the seodesk logger",
    )

    ##############
    # Validators #
    ##############

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Strip trailing slashes and warn about synchronous driver schemes."""
        import warnings

        url_str = str(v).rstrip("/")
        _SYNC_ONLY_SCHEMES = ("postgresql://", "sqlite://", "mysql://")
        if any(url_str.startswith(s) for s in _SYNC_ONLY_SCHEMES):
            warnings.warn(
                "Database URL uses a synchronous driver scheme. "
                "Use an async driver instead (e.g. postgresql+asyncpg, sqlite+aiosqlite).",
                stacklevel=4,
            )
        return url_str

    @field_validator("session_secret")
    @classmethod
    def validate_session_secret(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError("session_secret must be at least 32 characters long")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        return str(v).upper()

    def model_post_init(self, __context: object) -> None:
        """Run cross-field validation after model construction."""
        self.validate_configuration()

    def validate_configuration(self) -> None:
        """Validate complete configuration consistency.

        Raises:
            ValueError: If configuration is inconsistent
        """
        if self.session_backend == "redis" and not self.redis_url:
            raise ValueError("session_backend='redis' requires redis_url to be set")


__all__ = ["SeodeskConfig"]
