"""Service configuration.

Requires: DATABASE_URL
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Field config service settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        ...,
        description="SQLAlchemy database URL",
        examples=["postgresql+psycopg://user:pass@db:5432/fieldboard"],
    )
    auto_migrate: bool = Field(
        default=False,
        description="Run alembic upgrade head once at startup",
    )

    # Auth provider
    session_cookie_name: str = Field(
        default="better-auth.session_token",
        description="Cookie holding the auth provider's session token",
    )

    # HTTP
    api_prefix: str = Field(default="/api")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)

    # Logging
    service_name: str = Field(default="fieldboard")
    log_format: Literal["json", "console"] = Field(default="console")
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises ValidationError on first call if DATABASE_URL is missing.
    """
    return Settings()  # type: ignore[call-arg]
