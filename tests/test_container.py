"""Tests for container wiring."""

import asyncio

from nutrition_normalizer.adapters.bundled_sources import BundledSourceProvider
from nutrition_normalizer.adapters.upstream_client import HttpxUpstreamSourceClient
from nutrition_normalizer.config import Settings
from nutrition_normalizer.containers import build_container


def test_build_container_defaults_to_bundled_sources(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.source_provider, BundledSourceProvider)
    entries = asyncio.run(container.normalization_service.normalize_source("a"))
    assert len(entries) == 4
    asyncio.run(container.close_resources())


def test_build_container_uses_upstream_when_configured() -> None:
    container = build_container(
        Settings(upstream_base_url="http://localhost:3001", source_cache_ttl_seconds=5)
    )

    assert isinstance(container.source_provider, HttpxUpstreamSourceClient)
    payload_cache = container.normalization_service.payload_cache
    assert payload_cache is not None
    assert payload_cache.ttl_seconds == 5
    asyncio.run(container.close_resources())
