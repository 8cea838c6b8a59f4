"""Tests for configuration helpers."""

from nutrition_normalizer.config import Settings, parse_allowed_sources


def test_parse_allowed_sources() -> None:
    assert parse_allowed_sources(" A, b ,,c,a ") == frozenset({"a", "b", "c"})
    assert parse_allowed_sources("") == frozenset()
    assert parse_allowed_sources(None) == frozenset()


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("ALLOWED_SOURCES", "a,b")
    monkeypatch.setenv("UPSTREAM_BASE_URL", "http://localhost:3001")
    monkeypatch.setenv("SOURCE_CACHE_TTL_SECONDS", "30")

    settings = Settings()

    assert settings.allowed_sources == "a,b"
    assert settings.upstream_base_url == "http://localhost:3001"
    assert settings.source_cache_ttl_seconds == 30
