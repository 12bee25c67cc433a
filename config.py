"""
Configuration settings for the skillcoach session engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
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
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".skillcoach",
        description="Base directory for local roster and response files",
    )
    store_backend: Literal["memory", "jsonl", "sqlite"] = Field(
        default="sqlite",
        description="Response store implementation selected at startup",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy async URL (defaults to <data_dir>/responses.db)",
    )
    responses_file: Path | None = Field(
        default=None,
        description="JSON-lines response log (defaults to <data_dir>/responses.jsonl)",
    )
    roster_file: Path | None = Field(
        default=None,
        description="Persisted skill roster (defaults to <data_dir>/roster.json)",
    )

    # ========================================
    # Session
    # ========================================
    default_user_id: str = Field(
        default="default",
        description="User id recorded when none is given on the command line",
    )
    default_wait_minutes: float = Field(
        default=5,
        ge=0,
        description="Wait before a skill when the roster entry does not set one",
    )
    response_timeout_seconds: float = Field(
        default=30,
        gt=0,
        description="Presentation window before a skill is recorded as no-response",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Longest the session driver sleeps between schedule checks",
    )

    # ========================================
    # Progress Reports
    # ========================================
    progress_week_days: int = Field(
        default=7,
        ge=1,
        description="Number of days in the 'week' report window",
    )
    progress_month_days: int = Field(
        default=30,
        ge=1,
        description="Number of days in the 'month' report window",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum level written to stderr and the log file",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @model_validator(mode="after")
    def _derive_paths(self) -> "Settings":
        self.data_dir = Path(self.data_dir).expanduser()
        if self.database_url is None:
            self.database_url = f"sqlite+aiosqlite:///{self.data_dir / 'responses.db'}"
        if self.responses_file is None:
            self.responses_file = self.data_dir / "responses.jsonl"
        if self.roster_file is None:
            self.roster_file = self.data_dir / "roster.json"
        return self

    # ========================================
    # Helper Methods
    # ========================================
    def get_window_days(self, range_name: str) -> int:
        """Return the number of days covered by a named report window."""
        windows = {
            "week": self.progress_week_days,
            "month": self.progress_month_days,
        }
        if range_name not in windows:
            raise ValueError(f"Unknown report window: {range_name!r}")
        return windows[range_name]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
