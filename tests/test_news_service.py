"""Tests for the news service."""

import asyncio

import pytest

from gold_monitor.domain.errors import UpstreamError
from gold_monitor.services.cache import InMemoryCache
from gold_monitor.services.news import NEWS_CACHE_KEY, NewsService
from tests.conftest import FakeNewsClient, ManualClock


def test_news_is_fetched_once_and_cached(
    news_client: FakeNewsClient, cache: InMemoryCache, clock: ManualClock
) -> None:
    service = NewsService(client=news_client, cache=cache)

    first = asyncio.run(service.get_news())
    clock.advance(120)
    second = asyncio.run(service.get_news())

    assert first["cached"] is False
    assert first["articles"] == [
        {
            "title": "Gold hits record",
            "url": "https://news.test/gold",
            "source": "News Test",
            "publishedAt": "2024-01-05T10:00:00Z",
            "description": "Spot gold climbed.",
        }
    ]
    assert second["cached"] is True
    assert second["cacheAge"] == 120
    assert second["expiresIn"] == 3600 - 120
    assert news_client.calls == 1
    assert cache.has(NEWS_CACHE_KEY)


def test_news_without_api_key_fails(cache: InMemoryCache) -> None:
    service = NewsService(client=None, cache=cache)

    with pytest.raises(UpstreamError, match="API key not configured"):
        asyncio.run(service.get_news())


def test_news_rejects_malformed_articles(cache: InMemoryCache) -> None:
    service = NewsService(
        client=FakeNewsClient(payload={"articles": "nope"}), cache=cache
    )

    with pytest.raises(UpstreamError):
        asyncio.run(service.get_news())
