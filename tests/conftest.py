"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutrition_normalizer.config import Settings, parse_allowed_sources
from nutrition_normalizer.containers import AppContainer
from nutrition_normalizer.services.normalization import (
    NormalizationService,
    SourceProvider,
    UnknownSourceError,
)


@dataclass
class InMemorySourceProvider(SourceProvider):
    """Source provider serving raw payloads from a dict."""

    payloads: dict[str, list[object]] = field(default_factory=dict)
    fetches: list[str] = field(default_factory=list)

    async def fetch(self, source_key: str) -> list[object]:
        self.fetches.append(source_key)
        if source_key not in self.payloads:
            raise UnknownSourceError(source_key)
        return self.payloads[source_key]


def shape_a_record(**overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "entryId": "a-1",
        "timestamp": "2024-05-01T07:45:00Z",
        "foodName": "Greek yogurt",
        "serving": {"amount": 170, "unit": "g"},
        "macros": {"protein_g": 17, "carbs_g": 6, "fat_g": 0.7},
        "calories_kcal": 100,
    }
    record.update(overrides)
    return record


def shape_b_record(**overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "id": "b-1",
        "loggedAt": "2024-05-02T08:00:00+02:00",
        "name": "Peanut butter",
        "servingSize": "2 tbsp",
        "macros": {"protein": "8", "carbs": "6", "fat": "16"},
        "calories": "190",
    }
    record.update(overrides)
    return record


def shape_c_record(**overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "item": {"label": "Banana"},
        "logged_at": "2024-05-03T09:05:00Z",
        "serving_grams": 118,
        "nutrients": [
            {"key": "protein", "value": 1.3, "unit": "g"},
            {"key": "carbohydrate", "value": 27, "unit": "g"},
            {"key": "fat", "value": 0.4, "unit": "g"},
            {"key": "energy", "value": 105, "unit": "kcal"},
        ],
    }
    record.update(overrides)
    return record


def shape_d_record(**overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "id": "d-1",
        "time": "2024-05-04 08:30",
        "food": "Scrambled eggs",
        "serving": {"amount": 120, "unit": "g"},
        "macros": {"protein_g": 12, "carbs_g": 1.6, "fat_g": 11},
        "calories_kcal": 160,
    }
    record.update(overrides)
    return record


@pytest.fixture
def settings() -> Settings:
    return Settings(allowed_sources="a,b,c,d", environment="test")


@pytest.fixture
def source_provider() -> InMemorySourceProvider:
    return InMemorySourceProvider(
        payloads={
            "a": [shape_a_record()],
            "b": [shape_b_record()],
            "c": [shape_c_record()],
            "d": [shape_d_record()],
        }
    )


@pytest.fixture
def container(
    settings: Settings, source_provider: InMemorySourceProvider
) -> AppContainer:
    normalization_service = NormalizationService(
        provider=source_provider,
        allowed_sources=parse_allowed_sources(settings.allowed_sources),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        source_provider=source_provider,
        normalization_service=normalization_service,
        close_resources=close_resources,
    )
