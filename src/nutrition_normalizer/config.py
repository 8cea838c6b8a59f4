"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_SOURCES = "a,b,c,d"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    allowed_sources: str = DEFAULT_SOURCES
    data_dir: Path | None = None
    upstream_base_url: str | None = None
    upstream_timeout_seconds: float = 15
    source_cache_ttl_seconds: int = 0
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_sources(raw: str | None) -> frozenset[str]:
    """Parse the comma-separated list of servable source keys."""
    if raw is None:
        return frozenset()
    keys: set[str] = set()
    for chunk in raw.split(","):
        value = chunk.strip().lower()
        if value:
            keys.add(value)
    return frozenset(keys)
