"""Batch normalization and the source-facing service."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from nutrition_normalizer.domain.entries import (
    CanonicalEntry,
    UnrecognizedSourceShapeError,
)
from nutrition_normalizer.services.cache import SourcePayloadCache
from nutrition_normalizer.services.classifier import classify_batch
from nutrition_normalizer.services.normalizers import NORMALIZERS
from nutrition_normalizer.services.validation import validate_entry

_logger = logging.getLogger(__name__)


class UnknownSourceError(KeyError):
    """Raised when a source key is not registered."""


class SourceProvider(Protocol):
    """Interface for fetching raw entries for a source key."""

    async def fetch(self, source_key: str) -> list[object]:
        """Return the raw, untyped entries for a source."""


def normalize_entries(records: Sequence[object]) -> list[CanonicalEntry]:
    """Classify a batch by its first record and normalize every record.

    Raises UnrecognizedSourceShapeError when the first record matches no known
    shape; nothing is returned for the batch in that case.
    """
    shape = classify_batch(records)
    if shape is None:
        return []
    normalize = NORMALIZERS[shape]
    return [validate_entry(normalize(record)) for record in records]


@dataclass
class NormalizationService:
    """Resolves source keys to raw payloads and normalizes them."""

    provider: SourceProvider
    allowed_sources: frozenset[str]
    payload_cache: SourcePayloadCache | None = None
    debug: bool = False

    async def normalize_source(self, source_key: str) -> list[CanonicalEntry]:
        """Fetch and normalize all entries for a source key."""
        key = source_key.lower()
        if key not in self.allowed_sources:
            raise UnknownSourceError(source_key)

        records = await self._fetch(key)
        try:
            entries = normalize_entries(records)
        except UnrecognizedSourceShapeError as exc:
            _logger.warning("Source %s has an unrecognized shape: %s", key, exc)
            raise

        flagged = sum(1 for entry in entries if entry.issues is not None)
        _logger.info(
            "Normalized source %s: entries=%s flagged=%s", key, len(entries), flagged
        )
        if self.debug:
            for entry in entries:
                if entry.issues is not None:
                    _logger.info(
                        "Entry %s issues: %s", entry.id, entry.issues.to_dict()
                    )
        return entries

    async def _fetch(self, key: str) -> list[object]:
        if self.payload_cache is None:
            return await self.provider.fetch(key)
        return await self.payload_cache.get_or_fetch(key, self.provider.fetch)
