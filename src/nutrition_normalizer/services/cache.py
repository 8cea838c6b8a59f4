"""Short-lived cache of raw source payloads."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta


@dataclass
class SourcePayloadCache:
    """Reuses a source's raw payload for ttl_seconds after it was fetched.

    A non-positive ttl disables caching; every call then fetches.
    """

    ttl_seconds: int = 0
    _payloads: dict[str, tuple[datetime, list[object]]] = field(
        default_factory=dict, init=False, repr=False
    )

    async def get_or_fetch(
        self,
        source_key: str,
        fetch: Callable[[str], Awaitable[list[object]]],
    ) -> list[object]:
        """Return the cached payload for a source, fetching it when stale."""
        if self.ttl_seconds <= 0:
            return await fetch(source_key)
        now = datetime.now(tz=UTC)
        cached = self._payloads.get(source_key)
        if cached is not None:
            expires_at, records = cached
            if now < expires_at:
                return records
        records = await fetch(source_key)
        self._payloads[source_key] = (now + timedelta(seconds=self.ttl_seconds), records)
        return records
