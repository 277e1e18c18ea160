"""Foreign exchange rate service client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from gold_monitor.adapters.http_json import get_json
from gold_monitor.domain.errors import UpstreamError


class FxRateClient(Protocol):
    """Interface for FX rate lookups."""

    async def get_rates(self, base_currency: str) -> dict[str, float]:
        """Return a mapping of currency code to rate for one unit of the base."""


@dataclass
class HttpxFxRateClient(FxRateClient):
    """HTTPX-backed client for an open exchange-rate API."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float = 10.0
    ) -> "HttpxFxRateClient":
        """Create an FX client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def get_rates(self, base_currency: str) -> dict[str, float]:
        """Fetch the latest rate table for a base currency."""
        payload = await get_json(
            self.http_client,
            f"{self.base_url}/latest/{base_currency}",
            source="FX API",
            timeout=self.timeout_seconds,
        )
        if not isinstance(payload, dict) or payload.get("result") == "error":
            reason = payload.get("error-type") if isinstance(payload, dict) else None
            raise UpstreamError(f"FX API error: {reason or 'unexpected response'}")
        rates = payload.get("rates")
        if not isinstance(rates, dict):
            raise UpstreamError("FX API response has no rates")
        return rates

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
