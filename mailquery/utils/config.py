"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchSettings(BaseSettings):
    """Parser and search defaults, overridable with MAILQUERY_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAILQUERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_folder: str = "INBOX"
    default_limit: int = Field(default=20, ge=1, le=100)

    # Named range durations, in days
    recent_days: int = Field(default=7, ge=1)
    few_weeks_days: int = Field(default=21, ge=1)
    few_months_days: int = Field(default=90, ge=1)

    verbose: bool = False
    mailbox_path: Optional[str] = None


@lru_cache
def get_settings() -> SearchSettings:
    """Get cached settings instance."""
    return SearchSettings()
