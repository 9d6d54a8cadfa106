"""Configuration management for restrecord.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Settings are read once and cached;
the default transport is built from them.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated when the settings are created.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RESTRECORD_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "testing"] = "development"

    # Transport Settings
    base_url: str = "http://localhost:8000"
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for a response before giving up",
    )
    verify_ssl: bool = True
    user_agent: str = "restrecord/0.1.0"

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Resource paths are joined with '/', so the base never ends in one."""
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the process.
    Call ``get_settings.cache_clear()`` to force a reload (tests do this).

    Returns:
        Settings: The client settings.
    """
    return Settings()
