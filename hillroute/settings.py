"""Centralised environment-driven settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings sourced from ``HILLROUTE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HILLROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    MAX_CLIMB: int = Field(1, ge=0, le=25)
    STRATEGY: Literal["independent", "reverse"] = "independent"
    WORKERS: int = Field(1, ge=1)
    MAX_EXPANSIONS: Optional[int] = Field(None, ge=1)
    LOG_DIR: str = "./logs"
    ENV: str = "dev"


settings = Settings()

__all__ = ["Settings", "settings"]
