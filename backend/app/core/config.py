from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/moodstreak.db",
        alias="DATABASE_URL",
    )
    log_file: Path = Field(default=Path("logs/moodstreak.log"), alias="LOG_FILE")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    admin_api_token: str | None = Field(default=None, alias="ADMIN_TOKEN")

    # Store calls are bounded by this timeout; a timeout is a store failure.
    store_timeout_seconds: float = Field(default=5.0, alias="STORE_TIMEOUT_SEC")
    recent_moods_days: int = Field(default=7, alias="RECENT_MOODS_DAYS")

    version: str = Field(default_factory=lambda: Settings._load_version())

    @staticmethod
    def _load_version() -> str:
        version_env = os.getenv("VERSION")
        if version_env:
            return version_env
        version_file = Path("VERSION")
        if version_file.exists():
            return version_file.read_text(encoding="utf-8").strip()
        return "0.0.0"

    @field_validator("log_file", mode="before")
    @classmethod
    def _validate_log_file(cls, value: Path | str) -> Path:
        path = Path(value)
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: str | None) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if not value:
            return "INFO"
        normalized = str(value).upper()
        if normalized not in allowed:
            return "INFO"
        return normalized

    @field_validator("store_timeout_seconds", mode="before")
    @classmethod
    def _validate_store_timeout(cls, value: float | str | None) -> float:
        if value is None:
            return 5.0
        timeout = float(value)
        return max(timeout, 0.1)

    @field_validator("recent_moods_days", mode="before")
    @classmethod
    def _validate_recent_days(cls, value: int | str | None) -> int:
        if value is None:
            return 7
        days = int(value)
        return min(max(days, 1), 90)

    @field_validator("database_url", mode="before")
    @classmethod
    def _validate_database_url(cls, value: str | None) -> str:
        if not value:
            value = "sqlite:///./data/moodstreak.db"

        normalized = str(value)
        if normalized.startswith("postgres://"):
            normalized = normalized.replace("postgres://", "postgresql://", 1)
        if normalized.startswith("postgresql://") and "+asyncpg" not in normalized:
            normalized = normalized.replace("postgresql://", "postgresql+asyncpg://", 1)
        if normalized.startswith("sqlite://") and "+aiosqlite" not in normalized:
            normalized = normalized.replace("sqlite://", "sqlite+aiosqlite://", 1)

        if normalized.startswith("sqlite+aiosqlite:///"):
            db_path = normalized.split("///", maxsplit=1)[-1]
            if db_path and db_path != ":memory:":
                db_file = Path(db_path)
                db_file.parent.mkdir(parents=True, exist_ok=True)

        return normalized


@lru_cache
def get_settings() -> Settings:
    """Cached settings accessor."""

    return Settings()
