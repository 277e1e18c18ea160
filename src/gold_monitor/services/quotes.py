"""Price request handling with caching and a uniform response envelope."""

import asyncio
import logging
import math
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from gold_monitor.domain.errors import (
    InvalidParameter,
    PriceMonitorError,
    UnsupportedUnit,
)
from gold_monitor.domain.prices import (
    BASE_CURRENCY,
    SUPPORTED_METALS,
    point_payload,
    snapshot_payload,
)
from gold_monitor.services.cache import Cache, Clock
from gold_monitor.services.conversion import UNIT_FACTORS, unit_label
from gold_monitor.services.prices import PriceProvider

REQUEST_TYPES = ("current", "historical", "historical-range")
DEFAULT_DAYS = 30
MIN_DAYS = 1
MAX_DAYS = 60

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

_logger = logging.getLogger(__name__)

CachedResult = dict[str, object]


@dataclass(frozen=True)
class PriceQuery:
    """Query parameters for a price request."""

    metal: str = "XAU"
    currency: str = BASE_CURRENCY
    unit: str = "oz"
    type: str = "current"
    date: str | None = None
    days: int | str | None = DEFAULT_DAYS


@dataclass(frozen=True)
class HandlerResult:
    """HTTP status code and JSON body for a handled request."""

    status_code: int
    body: dict[str, object]


def clamp_days(raw: object) -> int:
    """Clamp a day window to 1..60, defaulting to 30 for non-numeric input."""
    try:
        days = int(str(raw).strip()) if not isinstance(raw, int) else raw
    except ValueError:
        return DEFAULT_DAYS
    return min(max(days, MIN_DAYS), MAX_DAYS)


def parse_query_date(raw: str) -> date:
    """Parse ``YYYYMMDD`` or ``YYYY-MM-DD``."""
    text = raw.strip()
    for fmt in ("%Y%m%d", "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    raise InvalidParameter(f"Invalid date: {raw!r}, expected YYYYMMDD")


def build_cache_key(
    purpose: str, metal: str, currency: str, unit: str, *extra: object
) -> str:
    """Build a deterministic cache key for a logical request."""
    parts = ["gold", purpose, metal, currency, unit, *(str(part) for part in extra)]
    return ":".join(parts)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class PriceRequestHandler:
    """Serves price requests from cache, fetching and converting on a miss."""

    provider: PriceProvider
    cache: Cache
    current_ttl_seconds: int = 24 * 60 * 60
    historical_ttl_seconds: int = 30 * 24 * 60 * 60
    range_ttl_seconds: int = 24 * 60 * 60
    dedupe_inflight: bool = False
    clock: Clock = _utc_now
    _inflight: dict[str, "asyncio.Task[CachedResult]"] = field(
        default_factory=dict, init=False, repr=False
    )

    async def handle(self, query: PriceQuery) -> HandlerResult:
        """Return the response envelope for a query, including failures."""
        try:
            body = await self._dispatch(query)
        except PriceMonitorError as exc:
            if exc.status_code >= 500:  # noqa: PLR2004
                _logger.exception("Price request failed: %s", query)
            else:
                _logger.info("Rejected price request %s: %s", query, exc)
            return HandlerResult(
                status_code=exc.status_code,
                body={
                    "success": False,
                    "error": str(exc),
                    "timestamp": self._now_ms(),
                },
            )
        return HandlerResult(status_code=200, body=body)

    async def _dispatch(self, query: PriceQuery) -> dict[str, object]:
        if query.type not in REQUEST_TYPES:
            raise InvalidParameter("Invalid type parameter")
        metal, currency, unit = _validate(query)
        if query.type == "current":
            key = build_cache_key("current", metal, currency, unit)
            return await self._serve(
                key,
                self.current_ttl_seconds,
                lambda: self._fetch_current(metal, currency, unit),
            )
        if query.type == "historical":
            if not query.date:
                raise InvalidParameter("Date parameter is required")
            day = parse_query_date(query.date)
            key = build_cache_key(
                "historical", metal, currency, unit, day.strftime("%Y%m%d")
            )
            return await self._serve(
                key,
                self.historical_ttl_seconds,
                lambda: self._fetch_historical(metal, currency, unit, day),
            )
        days = clamp_days(query.days)
        key = build_cache_key("range", metal, currency, unit, days)
        return await self._serve(
            key,
            self.range_ttl_seconds,
            lambda: self._fetch_range(metal, currency, unit, days),
        )

    async def _serve(
        self,
        key: str,
        ttl_seconds: int,
        fetch: Callable[[], Awaitable[CachedResult]],
    ) -> dict[str, object]:
        cached = self.cache.get(key)
        if isinstance(cached, dict):
            age = self.cache.age(key)
            remaining = self.cache.time_until_expiry(key)
            return {
                "success": True,
                "data": cached["data"],
                "degraded": cached["degraded"],
                "cached": True,
                "cacheAge": _whole_seconds(age.total_seconds() if age else 0),
                "expiresIn": _whole_seconds(
                    remaining.total_seconds() if remaining else 0
                ),
                "timestamp": self._now_ms(),
            }

        result = await self._load(key, ttl_seconds, fetch)
        return {
            "success": True,
            "data": result["data"],
            "degraded": result["degraded"],
            "cached": False,
            "timestamp": self._now_ms(),
        }

    async def _load(
        self,
        key: str,
        ttl_seconds: int,
        fetch: Callable[[], Awaitable[CachedResult]],
    ) -> CachedResult:
        async def fetch_and_store() -> CachedResult:
            result = await fetch()
            self.cache.set(key, result, ttl_seconds=ttl_seconds)
            return result

        if not self.dedupe_inflight:
            return await fetch_and_store()

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fetch_and_store())
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        return await asyncio.shield(task)

    async def _fetch_current(
        self, metal: str, currency: str, unit: str
    ) -> CachedResult:
        snapshot = await self.provider.get_price_with_conversion(
            metal, BASE_CURRENCY, currency, unit
        )
        return {
            "data": snapshot_payload(snapshot, unit_label(unit)),
            "degraded": snapshot.degraded,
        }

    async def _fetch_historical(
        self, metal: str, currency: str, unit: str, day: date
    ) -> CachedResult:
        snapshot = await self.provider.get_historical_price(metal, BASE_CURRENCY, day)
        converted = await self.provider.convert_snapshot(snapshot, currency, unit)
        return {
            "data": snapshot_payload(converted, unit_label(unit)),
            "degraded": converted.degraded,
        }

    async def _fetch_range(
        self, metal: str, currency: str, unit: str, days: int
    ) -> CachedResult:
        points = await self.provider.get_historical_data(metal, BASE_CURRENCY, days)
        converted, degraded = await self.provider.convert_series(
            points, BASE_CURRENCY, currency, unit
        )
        return {
            "data": [point_payload(point) for point in converted],
            "degraded": degraded,
        }

    def _now_ms(self) -> int:
        return int(self.clock().timestamp() * 1000)


def _validate(query: PriceQuery) -> tuple[str, str, str]:
    metal = query.metal.strip().upper()
    if metal not in SUPPORTED_METALS:
        raise InvalidParameter(f"Unsupported metal: {query.metal}")
    currency = query.currency.strip().upper()
    if not _CURRENCY_PATTERN.match(currency):
        raise InvalidParameter(f"Invalid currency: {query.currency}")
    unit = query.unit.strip().lower()
    if unit not in UNIT_FACTORS:
        raise UnsupportedUnit(f"Unsupported unit: {query.unit}")
    return metal, currency, unit


def _whole_seconds(seconds: float) -> int:
    return max(math.floor(seconds), 0)
