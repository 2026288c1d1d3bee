"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    database_url: str = Field(
        default="sqlite:///./data/runplan.db",
        description="SQLAlchemy-compatible database URL.",
    )
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)

    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))
    lock_dir: Path = Field(
        default=Path(".locks"),
        description="Directory holding per-user plan generation lock files.",
    )

    default_week_start_day: int = Field(default=1, ge=0, le=1)
    default_unit_system: str = Field(default="imperial")

    simulation_enabled: bool = Field(
        default=False,
        description="Allow synthetic progress simulation. Never enable against production data.",
    )
    simulation_buffer_days: int = Field(default=0, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper

    @field_validator("default_unit_system")
    @classmethod
    def normalize_unit_system(cls, value: str) -> str:
        lower = value.strip().lower()
        if lower not in {"metric", "imperial"}:
            raise ValueError("DEFAULT_UNIT_SYSTEM must be 'metric' or 'imperial'")
        return lower


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings
