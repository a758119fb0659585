"""
Application settings.

Values come from environment variables prefixed ``SIGHTINGS_`` (or a local
``.env`` file). The eBird key is also accepted as plain ``EBIRD_API_KEY``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the API server, providers and cache."""

    model_config = SettingsConfigDict(
        env_prefix="SIGHTINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    app_name: str = "wildlife-sightings"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    api_host: str = "127.0.0.1"
    api_port: int = Field(default=8000, ge=1, le=65535)

    ebird_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SIGHTINGS_EBIRD_API_KEY", "EBIRD_API_KEY"),
        description="eBird API token; the avian provider is skipped when unset.",
    )
    ebird_base_url: str = "https://api.ebird.org/v2"
    inat_base_url: str = "https://api.inaturalist.org/v1"

    http_timeout_seconds: float = Field(default=30.0, gt=0)
    max_workers: int = Field(default=9, ge=1, le=64)

    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_max_entries: int = Field(default=100, ge=1)
    cache_evict_count: int = Field(default=20, ge=1)

    data_dir: Path = Path("data")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings (read once)."""
    return Settings()
