"""Price provider that normalizes upstream series into snapshots."""

import asyncio
import logging
import math
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, time

from gold_monitor.adapters.price_api_client import PriceApiClient
from gold_monitor.domain.errors import (
    InsufficientData,
    NoData,
    PriceMonitorError,
    UpstreamError,
)
from gold_monitor.domain.prices import BASE_CURRENCY, HistoricalPoint, PriceSnapshot
from gold_monitor.services.conversion import CurrencyConverter, convert_unit

GRAMS_PER_TROY_OUNCE = 31.1035
PURITY_RATIOS = {
    "24k": 1.0,
    "22k": 0.9167,
    "21k": 0.875,
    "20k": 0.8333,
    "18k": 0.75,
}
SPREAD_RATIO = 0.002
MULTI_CURRENCIES = ("USD", "EUR", "GBP")

# Enough days to span a long weekend and still find two trading days.
_CURRENT_LOOKBACK_DAYS = 7
_PRICE_KEYS = ("price", "close", "value")
_ERROR_KEYS = ("error", "Error Message", "Note", "Information", "message")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesPoint:
    """One normalized upstream data point; ``price`` is None if unparsable."""

    date: date
    price: float | None
    ask: float | None = None
    bid: float | None = None
    observed_at: datetime | None = None


@dataclass
class PriceProvider:
    """Fetches prices from one upstream API and applies conversions."""

    client: PriceApiClient
    converter: CurrencyConverter
    history_window_days: int = 365

    async def get_current_price(
        self, metal: str, currency: str = BASE_CURRENCY
    ) -> PriceSnapshot:
        """Return the latest price with change against the prior data point."""
        series = await self._fetch(metal, currency, _CURRENT_LOOKBACK_DAYS)
        priced = [point for point in series if point.price is not None]
        if len(priced) < 2:  # noqa: PLR2004
            raise InsufficientData(
                f"Not enough data points to compute a change for {metal}/{currency}"
            )
        latest, previous = priced[0], priced[1]
        return _build_snapshot(
            metal,
            currency,
            latest,
            price=latest.price,
            previous_close=previous.price,
        )

    async def get_historical_price(
        self, metal: str, currency: str, on: date
    ) -> PriceSnapshot:
        """Return the price for a day, resolving to the closest prior day."""
        days_ago = (datetime.now(tz=UTC).date() - on).days
        lookback = max(self.history_window_days, days_ago + 1)
        series = await self._fetch(metal, currency, lookback)
        index = resolve_historical_index(series, on)
        point = series[index]
        degraded = point.date != on
        if degraded:
            _logger.warning(
                "No %s/%s price on %s, using %s", metal, currency, on, point.date
            )

        price = point.price
        if price is None:
            degraded = True
            price = await self._substitute_price(metal, currency, point.date)

        previous_close = next(
            (p.price for p in series[index + 1 :] if p.price is not None), price
        )
        snapshot = _build_snapshot(
            metal, currency, point, price=price, previous_close=previous_close
        )
        return replace(
            snapshot, degraded=degraded, requested_date=on, resolved_date=point.date
        )

    async def get_historical_data(
        self, metal: str, currency: str, days: int
    ) -> list[HistoricalPoint]:
        """Return up to ``days`` most recent prices, oldest first."""
        series = await self._fetch(metal, currency, days)
        points = [
            HistoricalPoint(date=point.date, price=point.price)
            for point in series
            if point.price is not None
        ][: max(days, 0)]
        points.reverse()
        return points

    async def get_multi_currency_price(self, metal: str) -> list[PriceSnapshot]:
        """Fetch the current price in several currencies, omitting failures."""
        results = await asyncio.gather(
            *(self._current_or_none(metal, currency) for currency in MULTI_CURRENCIES)
        )
        return [snapshot for snapshot in results if snapshot is not None]

    async def get_price_with_conversion(
        self,
        metal: str,
        base_currency: str = BASE_CURRENCY,
        target_currency: str = BASE_CURRENCY,
        unit: str = "oz",
    ) -> PriceSnapshot:
        """Fetch the current price and convert currency, then unit."""
        snapshot = await self.get_current_price(metal, base_currency)
        return await self.convert_snapshot(snapshot, target_currency, unit)

    async def convert_snapshot(
        self, snapshot: PriceSnapshot, target_currency: str, unit: str
    ) -> PriceSnapshot:
        """Apply currency then unit conversion to every monetary field."""
        target = target_currency.upper()
        degraded = snapshot.degraded
        rate = 1.0
        if target != snapshot.currency:
            fx_rate = await self.converter.rate(snapshot.currency, target)
            if fx_rate is None:
                degraded = True
            else:
                rate = fx_rate

        def money(value: float) -> float:
            return convert_unit(value * rate, unit)

        return replace(
            snapshot,
            currency=target,
            unit=unit,
            price=money(snapshot.price),
            ask=money(snapshot.ask),
            bid=money(snapshot.bid),
            change=money(snapshot.change),
            previous_close=money(snapshot.previous_close),
            gram_prices={
                purity: value * rate for purity, value in snapshot.gram_prices.items()
            },
            degraded=degraded,
        )

    async def convert_series(
        self,
        points: list[HistoricalPoint],
        from_currency: str,
        target_currency: str,
        unit: str,
    ) -> tuple[list[HistoricalPoint], bool]:
        """Convert a series; the flag reports an unconverted currency fallback."""
        rate = await self.converter.rate(from_currency, target_currency)
        degraded = rate is None
        factor = 1.0 if rate is None else rate
        converted = [
            HistoricalPoint(
                date=point.date, price=convert_unit(point.price * factor, unit)
            )
            for point in points
        ]
        return converted, degraded

    async def _fetch(self, metal: str, currency: str, days: int) -> list[SeriesPoint]:
        payload = await self.client.fetch_series(metal, currency, days)
        series = normalize_series(payload, metal, currency)
        if not series:
            raise NoData(f"No price data available for {metal}/{currency}")
        return series

    async def _current_or_none(
        self, metal: str, currency: str
    ) -> PriceSnapshot | None:
        try:
            return await self.get_current_price(metal, currency)
        except PriceMonitorError as exc:
            _logger.warning("Skipping %s/%s price: %s", metal, currency, exc)
            return None

    async def _substitute_price(self, metal: str, currency: str, day: date) -> float:
        """Replace an unparsable historical price with the current price or zero."""
        _logger.warning(
            "Unparsable %s/%s price on %s, substituting current price",
            metal,
            currency,
            day,
        )
        try:
            current = await self.get_current_price(metal, currency)
        except PriceMonitorError as exc:
            _logger.warning("Current price substitute failed, using 0: %s", exc)
            return 0.0
        return current.price


def resolve_historical_index(series: list[SeriesPoint], on: date) -> int:
    """Pick the exact day, else the latest earlier day, else the oldest day.

    ``series`` must be non-empty and sorted newest first.
    """
    for index, point in enumerate(series):
        if point.date <= on:
            return index
    return len(series) - 1


def normalize_series(
    payload: object, metal: str, currency: str = BASE_CURRENCY
) -> list[SeriesPoint]:
    """Normalize upstream payload shapes into unique points, newest first.

    Date-keyed ``rates`` entries are read as the ``{currency}{metal}`` price
    (``USDXAU``); a bare metal rate is metal units per currency unit and is
    inverted.
    """
    if isinstance(payload, list):
        raw_points = [_point_from_mapping(item) for item in payload]
    elif isinstance(payload, dict):
        if isinstance(payload.get("data"), list):
            raw_points = [_point_from_mapping(item) for item in payload["data"]]
        elif isinstance(payload.get("rates"), dict):
            raw_points = [
                _point_from_rate(day, value, metal, currency.upper())
                for day, value in payload["rates"].items()
            ]
        elif _upstream_error(payload):
            raise UpstreamError(f"Price API error: {_upstream_error(payload)}")
        elif not payload or "data" in payload:
            raw_points = []
        else:
            raise UpstreamError("Price API returned an unrecognized payload")
    else:
        raise UpstreamError("Price API returned an unrecognized payload")

    seen: set[date] = set()
    points: list[SeriesPoint] = []
    for point in raw_points:
        if point is None or point.date in seen:
            continue
        seen.add(point.date)
        points.append(point)
    points.sort(key=lambda point: point.date, reverse=True)
    return points


def _build_snapshot(
    metal: str,
    currency: str,
    point: SeriesPoint,
    *,
    price: float,
    previous_close: float,
) -> PriceSnapshot:
    change = price - previous_close
    change_percent = change / previous_close * 100 if previous_close else 0.0
    gram_price = price / GRAMS_PER_TROY_OUNCE
    observed_at = point.observed_at or datetime.combine(point.date, time.min, UTC)
    return PriceSnapshot(
        metal=metal,
        currency=currency.upper(),
        unit="oz",
        price=price,
        ask=point.ask if point.ask is not None else price * (1 + SPREAD_RATIO),
        bid=point.bid if point.bid is not None else price * (1 - SPREAD_RATIO),
        previous_close=previous_close,
        change=change,
        change_percent=change_percent,
        observed_at=observed_at,
        gram_prices={
            purity: gram_price * ratio for purity, ratio in PURITY_RATIOS.items()
        },
    )


def _point_from_mapping(item: object) -> SeriesPoint | None:
    if not isinstance(item, dict):
        return None
    day = _parse_date(item.get("date") or item.get("timestamp"))
    if day is None:
        return None
    raw_price = next((item[key] for key in _PRICE_KEYS if key in item), None)
    observed_at = _from_epoch(item.get("timestamp"))
    return SeriesPoint(
        date=day,
        price=_parse_price(raw_price),
        ask=_parse_price(item.get("ask")),
        bid=_parse_price(item.get("bid")),
        observed_at=observed_at,
    )


def _point_from_rate(
    day: str, value: object, metal: str, currency: str
) -> SeriesPoint | None:
    parsed_day = _parse_date(day)
    if parsed_day is None:
        return None
    if not isinstance(value, dict):
        return SeriesPoint(date=parsed_day, price=_parse_price(value))
    for key in (f"{currency}{metal}", *_PRICE_KEYS):
        if key in value:
            return SeriesPoint(date=parsed_day, price=_parse_price(value[key]))
    per_unit = _parse_price(value.get(metal))
    return SeriesPoint(
        date=parsed_day, price=_parse_price(1 / per_unit) if per_unit else None
    )


def _parse_date(raw: object) -> date | None:
    """Parse ``YYYYMMDD``, ISO dates, ISO datetimes, or epoch seconds."""
    if isinstance(raw, int | float) and not isinstance(raw, bool):
        moment = _from_epoch(raw)
        return moment.date() if moment else None
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    try:
        if len(text) == 8 and text.isdigit():  # noqa: PLR2004
            return datetime.strptime(text, "%Y%m%d").date()  # noqa: DTZ007
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _from_epoch(raw: object) -> datetime | None:
    if not isinstance(raw, int | float) or isinstance(raw, bool):
        return None
    try:
        return datetime.fromtimestamp(raw, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_price(raw: object) -> float | None:
    """Return a positive finite price, or None."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def _upstream_error(payload: dict[str, object]) -> str | None:
    for key in _ERROR_KEYS:
        detail = payload.get(key)
        if isinstance(detail, dict):
            detail = detail.get("info") or detail.get("message") or detail
        if detail:
            return str(detail)
    if payload.get("success") is False:
        return "request unsuccessful"
    return None
