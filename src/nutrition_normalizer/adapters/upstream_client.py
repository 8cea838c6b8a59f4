"""HTTP client for the upstream raw-source service."""

from dataclasses import dataclass

import httpx

from nutrition_normalizer.services.normalization import SourceProvider


class UpstreamSourceError(RuntimeError):
    """Raised when the upstream service cannot return a payload."""


@dataclass
class HttpxUpstreamSourceClient(SourceProvider):
    """Fetches raw entries with `GET <base_url>/?source=<key>`."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float = 15
    ) -> "HttpxUpstreamSourceClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def fetch(self, source_key: str) -> list[object]:
        """Fetch the raw entries for a source key."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/",
                params={"source": source_key},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamSourceError(
                f"Failed to fetch source {source_key}: {exc}"
            ) from exc
        if not isinstance(payload, list):
            return []
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
