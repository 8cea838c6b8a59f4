"""Raw entries read from JSON fixture files."""

import json
from dataclasses import dataclass
from pathlib import Path

from nutrition_normalizer.services.normalization import (
    SourceProvider,
    UnknownSourceError,
)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass
class BundledSourceProvider(SourceProvider):
    """Loads `entries.source-<key>.json` from a directory."""

    data_dir: Path = DEFAULT_DATA_DIR

    async def fetch(self, source_key: str) -> list[object]:
        """Return the parsed fixture for a source key."""
        path = self.data_dir / f"entries.source-{source_key}.json"
        if not path.is_file():
            raise UnknownSourceError(source_key)
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            return []
        return payload
