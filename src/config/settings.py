"""Application settings using Pydantic Settings.

Centralized configuration for the bookkeeping progress panel.

Every value can be overridden with a PROGRESS_-prefixed environment
variable or a .env file, e.g. PROGRESS_RED_THRESHOLD=4.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROGRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="Bookkeeping Progress Panel", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Root log level")

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Client list backlog colouring (unattended months)
    yellow_threshold: int = Field(default=2, ge=0, description="Unattended months for a yellow row")
    red_threshold: int = Field(default=3, ge=0, description="Unattended months for a red row")

    # Analysis defaults
    attention_rate_threshold: int = Field(
        default=50, ge=0, le=100,
        description="Clients below this completion rate are flagged for attention",
    )
    default_period_months: int = Field(
        default=12, ge=1, description="Length of the default analysis period in months"
    )
    period_options_months: int = Field(
        default=24, ge=1, description="How many past months are offered as period options"
    )
    fiscal_anchor_offset: int = Field(
        default=2, ge=0, le=11,
        description="Months before the current month used as the fiscal-month sort anchor",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if self.yellow_threshold > self.red_threshold:
            raise ValueError(
                "yellow_threshold must not exceed red_threshold "
                f"({self.yellow_threshold} > {self.red_threshold})"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Cached settings loaded from environment.
    """
    return Settings()
