"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrition_normalizer.adapters.bundled_sources import (
    DEFAULT_DATA_DIR,
    BundledSourceProvider,
)
from nutrition_normalizer.adapters.upstream_client import HttpxUpstreamSourceClient
from nutrition_normalizer.config import Settings, parse_allowed_sources
from nutrition_normalizer.services.cache import SourcePayloadCache
from nutrition_normalizer.services.normalization import (
    NormalizationService,
    SourceProvider,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    source_provider: SourceProvider
    normalization_service: NormalizationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    upstream_client: HttpxUpstreamSourceClient | None = None
    source_provider: SourceProvider
    if resolved_settings.upstream_base_url:
        upstream_client = HttpxUpstreamSourceClient.create(
            base_url=resolved_settings.upstream_base_url,
            timeout_seconds=resolved_settings.upstream_timeout_seconds,
        )
        source_provider = upstream_client
    else:
        source_provider = BundledSourceProvider(
            resolved_settings.data_dir or DEFAULT_DATA_DIR
        )
    normalization_service = NormalizationService(
        provider=source_provider,
        allowed_sources=parse_allowed_sources(resolved_settings.allowed_sources),
        payload_cache=SourcePayloadCache(
            ttl_seconds=resolved_settings.source_cache_ttl_seconds
        ),
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        if upstream_client is not None:
            await upstream_client.close()

    return AppContainer(
        settings=resolved_settings,
        source_provider=source_provider,
        normalization_service=normalization_service,
        close_resources=close_resources,
    )
