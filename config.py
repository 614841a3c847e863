"""
Configuration settings for the kisokyu quiz scheduler.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KISOKYU_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Persistence
    # ========================================
    db_path: Path = Field(
        default=Path.home() / ".kisokyu" / "state.db",
        description="SQLite file holding mastery boxes and the session log",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Minimum level for the stderr log sink",
    )

    # ========================================
    # Session composition
    # ========================================
    bank_draw: int = Field(
        default=15,
        ge=0,
        description="Questions sampled from the static bank per session",
    )
    template_draw: int = Field(
        default=5,
        ge=0,
        description="Generated true/false variants per session",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for reproducible sessions (unset = nondeterministic)",
    )

    # ========================================
    # Content
    # ========================================
    question_bank_path: Path | None = Field(
        default=None,
        description="Override for the bundled question bank JSON",
    )
    template_bank_path: Path | None = Field(
        default=None,
        description="Override for the bundled template pair JSON",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
