"""
Configuration settings for recall-cli.

Uses Pydantic Settings for environment variable management with .env file support.
Variables are read with the RECALL_ prefix, e.g. RECALL_DAILY_NEW_CARDS=20.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Daily new-card limit can never go below this
MIN_DAILY_NEW_CARDS = 5


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RECALL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Study
    # ========================================
    daily_new_cards: int = Field(
        default=30,
        description=f"Maximum new cards introduced per day (minimum {MIN_DAILY_NEW_CARDS})",
    )

    # ========================================
    # Storage
    # ========================================
    db_path: Path = Field(
        default=Path.home() / ".recall" / "cards.db",
        description="SQLite database holding cards, decks and review history",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum level written to stderr",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated at 10 MB)",
    )

    @field_validator("daily_new_cards")
    @classmethod
    def _floor_daily_new_cards(cls, value: int) -> int:
        return max(MIN_DAILY_NEW_CARDS, value)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
