"""
Configuration settings for the recall engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///recall.db",
        description="SQLAlchemy connection string for the card store",
    )

    # ========================================
    # Calendar
    # ========================================
    timezone: str | None = Field(
        default=None,
        description="IANA timezone for calendar days (None = host local zone)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Aggregate Cache (seconds)
    # ========================================
    due_count_ttl_seconds: float = Field(
        default=30,
        ge=0,
        description="How long a total due count stays cached",
    )
    daily_queue_ttl_seconds: float = Field(
        default=300,
        ge=0,
        description="How long a daily review queue stays cached",
    )
    set_stats_ttl_seconds: float = Field(
        default=60,
        ge=0,
        description="How long per-set statistics stay cached",
    )
    forecast_ttl_seconds: float = Field(
        default=300,
        ge=0,
        description="How long due forecasts and topic proficiencies stay cached",
    )

    # ========================================
    # Study Sessions
    # ========================================
    default_max_new: int = Field(
        default=5,
        ge=0,
        description="New cards per study session",
    )
    default_max_review: int = Field(
        default=20,
        ge=0,
        description="Review cards per study session",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
