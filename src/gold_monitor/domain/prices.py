"""Price domain models and their JSON payloads."""

from dataclasses import dataclass, field
from datetime import date, datetime

SUPPORTED_METALS = ("XAU", "XAG", "XPT", "XPD")
BASE_CURRENCY = "USD"
BASE_UNIT = "oz"


@dataclass(frozen=True)
class HistoricalPoint:
    """Closing price for a single calendar day."""

    date: date
    price: float


@dataclass(frozen=True)
class PriceSnapshot:
    """Normalized price for a metal in one currency and unit.

    ``degraded`` is set whenever a fallback produced the numbers: an unconverted
    price after a failed FX lookup, a substituted historical date, or a
    substituted current/zero price.
    """

    metal: str
    currency: str
    unit: str
    price: float
    ask: float
    bid: float
    previous_close: float
    change: float
    change_percent: float
    observed_at: datetime
    gram_prices: dict[str, float] = field(default_factory=dict)
    degraded: bool = False
    requested_date: date | None = None
    resolved_date: date | None = None

    @property
    def used_fallback_date(self) -> bool:
        """Whether a historical lookup resolved to a different day."""
        return (
            self.requested_date is not None
            and self.resolved_date is not None
            and self.requested_date != self.resolved_date
        )


def snapshot_payload(snapshot: PriceSnapshot, unit_label: str) -> dict[str, object]:
    """Serialize a snapshot into the dashboard JSON contract."""
    payload: dict[str, object] = {
        "metal": snapshot.metal,
        "currency": snapshot.currency,
        "unit": snapshot.unit,
        "unitLabel": unit_label,
        "price": snapshot.price,
        "ask": snapshot.ask,
        "bid": snapshot.bid,
        "prevClosePrice": snapshot.previous_close,
        "ch": snapshot.change,
        "chp": snapshot.change_percent,
        "timestamp": int(snapshot.observed_at.timestamp()),
        "observedAt": snapshot.observed_at.isoformat(),
        "degraded": snapshot.degraded,
    }
    for purity, value in snapshot.gram_prices.items():
        payload[f"priceGram{purity}"] = value
    if snapshot.requested_date is not None:
        payload["requestedDate"] = snapshot.requested_date.isoformat()
    if snapshot.resolved_date is not None:
        payload["resolvedDate"] = snapshot.resolved_date.isoformat()
        payload["usedFallbackDate"] = snapshot.used_fallback_date
    return payload


def point_payload(point: HistoricalPoint) -> dict[str, object]:
    """Serialize a historical point as ``{date: YYYY-MM-DD, price}``."""
    return {"date": point.date.isoformat(), "price": point.price}
