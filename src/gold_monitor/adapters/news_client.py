"""GNews search API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from gold_monitor.adapters.http_json import get_json


class NewsClient(Protocol):
    """Interface for news searches."""

    async def search(self, query: str, limit: int = 5) -> dict[str, object]:
        """Search articles and return raw API data."""


@dataclass
class HttpxNewsClient(NewsClient):
    """HTTPX-backed GNews client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 10.0
    ) -> "HttpxNewsClient":
        """Create a news client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search(self, query: str, limit: int = 5) -> dict[str, object]:
        """Search English articles matching a query."""
        payload = await get_json(
            self.http_client,
            f"{self.base_url}/search",
            source="GNews API",
            timeout=self.timeout_seconds,
            params={"q": query, "lang": "en", "max": limit, "apikey": self.api_key},
        )
        return payload if isinstance(payload, dict) else {}

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
