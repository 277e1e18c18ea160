"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from gold_monitor.adapters.fx_client import HttpxFxRateClient
from gold_monitor.adapters.news_client import HttpxNewsClient
from gold_monitor.adapters.price_api_client import HttpxPriceApiClient
from gold_monitor.config import Settings
from gold_monitor.services.cache import Cache, InMemoryCache
from gold_monitor.services.conversion import CurrencyConverter
from gold_monitor.services.news import NewsService
from gold_monitor.services.prices import PriceProvider
from gold_monitor.services.quotes import PriceRequestHandler


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cache: Cache
    price_provider: PriceProvider
    price_handler: PriceRequestHandler
    news_service: NewsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    timeout = resolved_settings.http_timeout_seconds
    cache = InMemoryCache()
    price_client = HttpxPriceApiClient.create(
        api_key=resolved_settings.price_api_key,
        base_url=resolved_settings.price_api_base_url,
        timeout_seconds=timeout,
    )
    fx_client = HttpxFxRateClient.create(
        base_url=resolved_settings.fx_api_base_url,
        timeout_seconds=timeout,
    )
    news_client = (
        HttpxNewsClient.create(
            api_key=resolved_settings.news_api_key,
            base_url=resolved_settings.news_api_base_url,
            timeout_seconds=timeout,
        )
        if resolved_settings.news_api_key
        else None
    )
    price_provider = PriceProvider(
        client=price_client,
        converter=CurrencyConverter(fx_client),
        history_window_days=resolved_settings.history_window_days,
    )
    price_handler = PriceRequestHandler(
        provider=price_provider,
        cache=cache,
        current_ttl_seconds=resolved_settings.current_ttl_seconds,
        historical_ttl_seconds=resolved_settings.historical_ttl_seconds,
        range_ttl_seconds=resolved_settings.range_ttl_seconds,
        dedupe_inflight=resolved_settings.dedupe_inflight_requests,
    )
    news_service = NewsService(
        client=news_client,
        cache=cache,
        ttl_seconds=resolved_settings.news_ttl_seconds,
    )

    async def close_resources() -> None:
        await price_client.close()
        await fx_client.close()
        if news_client is not None:
            await news_client.close()

    return AppContainer(
        settings=resolved_settings,
        cache=cache,
        price_provider=price_provider,
        price_handler=price_handler,
        news_service=news_service,
        close_resources=close_resources,
    )
