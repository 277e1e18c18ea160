"""Unit and currency conversion for per-ounce prices."""

import logging
import math
from dataclasses import dataclass

from gold_monitor.adapters.fx_client import FxRateClient
from gold_monitor.domain.errors import RateUnavailable, UnsupportedUnit, UpstreamError

# Divisors applied to a price per troy ounce.
UNIT_FACTORS: dict[str, float] = {
    "oz": 1.0,
    "gram": 31.1035,
    "kg": 0.0311035,
    "tola": 2.6667,
    "baht": 15.244,
}

UNIT_LABELS: dict[str, str] = {
    "oz": "Troy Ounce",
    "gram": "Gram",
    "kg": "Kilogram",
    "tola": "Tola",
    "baht": "Baht",
}

_logger = logging.getLogger(__name__)


def convert_unit(price_per_oz: float, unit: str) -> float:
    """Convert a per-ounce price into a price for another unit."""
    factor = UNIT_FACTORS.get(unit)
    if factor is None:
        raise UnsupportedUnit(f"Unsupported unit: {unit}")
    return price_per_oz / factor


def unit_label(unit: str) -> str:
    """Return a display name for a unit, echoing unknown codes."""
    return UNIT_LABELS.get(unit, unit)


@dataclass
class CurrencyConverter:
    """Best-effort currency conversion backed by an FX rate service."""

    fx_client: FxRateClient

    async def rate(self, from_currency: str, to_currency: str) -> float | None:
        """Return the FX rate, or None when it could not be obtained."""
        source = from_currency.upper()
        target = to_currency.upper()
        if source == target:
            return 1.0
        try:
            rates = await self.fx_client.get_rates(source)
            value = rates.get(target)
            if value is None:
                raise RateUnavailable(f"No {source}->{target} rate available")
            rate = float(value)
            if not math.isfinite(rate) or rate <= 0:
                raise RateUnavailable(f"Invalid {source}->{target} rate: {value!r}")
            return rate
        except (UpstreamError, RateUnavailable, TypeError, ValueError) as exc:
            _logger.warning(
                "Currency conversion %s->%s failed, keeping unconverted price: %s",
                source,
                target,
                exc,
            )
            return None

    async def convert(
        self, price: float, from_currency: str, to_currency: str
    ) -> float:
        """Convert a price, falling back to the original value on failure."""
        rate = await self.rate(from_currency, to_currency)
        if rate is None:
            return price
        return price * rate
