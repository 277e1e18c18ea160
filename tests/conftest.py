"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from gold_monitor.adapters.fx_client import FxRateClient
from gold_monitor.adapters.news_client import NewsClient
from gold_monitor.adapters.price_api_client import PriceApiClient
from gold_monitor.config import Settings
from gold_monitor.containers import AppContainer
from gold_monitor.services.cache import InMemoryCache
from gold_monitor.services.conversion import CurrencyConverter
from gold_monitor.services.news import NewsService
from gold_monitor.services.prices import PriceProvider
from gold_monitor.services.quotes import PriceRequestHandler

DEFAULT_SERIES: list[dict[str, object]] = [
    {"date": "2024-01-05", "price": 2050.0},
    {"date": "2024-01-04", "price": 2000.0},
    {"date": "2024-01-03", "price": 1990.0},
]


@dataclass
class ManualClock:
    """Clock that only moves when told to."""

    now: datetime = field(default_factory=lambda: datetime(2024, 1, 10, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class FakePriceApiClient(PriceApiClient):
    """Price API returning a fixed newest-first series, overridable per currency."""

    series: list[dict[str, object]] = field(
        default_factory=lambda: list(DEFAULT_SERIES)
    )
    calls: list[tuple[str, str, int]] = field(default_factory=list)
    error: Exception | None = None
    failing_currencies: set[str] = field(default_factory=set)
    payloads: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    delay_seconds: float = 0.0

    async def fetch_series(self, metal: str, currency: str, days: int) -> object:
        self.calls.append((metal, currency, days))
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        if currency in self.failing_currencies:
            return {"data": []}
        return {"data": list(self.payloads.get(currency, self.series))}


@dataclass
class FakeFxRateClient(FxRateClient):
    """FX service with a static rate table."""

    rates: dict[str, dict[str, float]] = field(
        default_factory=lambda: {"USD": {"USD": 1.0, "EUR": 0.9, "GBP": 0.8}}
    )
    calls: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def get_rates(self, base_currency: str) -> dict[str, float]:
        self.calls.append(base_currency)
        if self.error is not None:
            raise self.error
        return self.rates.get(base_currency, {})


@dataclass
class FakeNewsClient(NewsClient):
    """News API returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "articles": [
                {
                    "title": "Gold hits record",
                    "url": "https://news.test/gold",
                    "source": {"name": "News Test"},
                    "publishedAt": "2024-01-05T10:00:00Z",
                    "description": "Spot gold climbed.",
                }
            ]
        }
    )
    calls: int = 0

    async def search(self, query: str, limit: int = 5) -> dict[str, object]:
        self.calls += 1
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(price_api_key="price-key", news_api_key="news-key")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> InMemoryCache:
    return InMemoryCache(clock=clock)


@pytest.fixture
def price_client() -> FakePriceApiClient:
    return FakePriceApiClient()


@pytest.fixture
def fx_client() -> FakeFxRateClient:
    return FakeFxRateClient()


@pytest.fixture
def news_client() -> FakeNewsClient:
    return FakeNewsClient()


@pytest.fixture
def provider(
    price_client: FakePriceApiClient, fx_client: FakeFxRateClient
) -> PriceProvider:
    return PriceProvider(client=price_client, converter=CurrencyConverter(fx_client))


@pytest.fixture
def handler(
    provider: PriceProvider, cache: InMemoryCache, clock: ManualClock
) -> PriceRequestHandler:
    return PriceRequestHandler(provider=provider, cache=cache, clock=clock)


@pytest.fixture
def container(
    settings: Settings,
    cache: InMemoryCache,
    provider: PriceProvider,
    handler: PriceRequestHandler,
    news_client: FakeNewsClient,
) -> AppContainer:
    news_service = NewsService(client=news_client, cache=cache)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        cache=cache,
        price_provider=provider,
        price_handler=handler,
        news_service=news_service,
        close_resources=close_resources,
    )
