"""Upstream precious-metal price API client (metalpriceapi.com)."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Protocol

import httpx

from gold_monitor.adapters.http_json import get_json

# Longest span the timeframe endpoint serves in one request.
MAX_TIMEFRAME_DAYS = 365


class PriceApiClient(Protocol):
    """Interface for the upstream time series API."""

    async def fetch_series(self, metal: str, currency: str, days: int) -> object:
        """Return the raw daily series payload covering the last ``days`` days."""


def _utc_today() -> date:
    return datetime.now(tz=UTC).date()


@dataclass
class HttpxPriceApiClient(PriceApiClient):
    """HTTPX-backed client for the metalpriceapi ``timeframe`` endpoint."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0
    today: Callable[[], date] = field(default=_utc_today, repr=False)

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 10.0
    ) -> "HttpxPriceApiClient":
        """Create a price API client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def fetch_series(self, metal: str, currency: str, days: int) -> object:
        """Fetch daily rates for a metal, quoted against ``currency``.

        The window ends today and is capped at the endpoint's one-year limit.
        """
        span = min(max(days, 1), MAX_TIMEFRAME_DAYS)
        end = self.today()
        start = end - timedelta(days=span - 1)
        return await get_json(
            self.http_client,
            f"{self.base_url}/timeframe",
            source="Price API",
            timeout=self.timeout_seconds,
            params={
                "api_key": self.api_key,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "base": currency,
                "currencies": metal,
            },
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
