"""Tests for container wiring."""

import asyncio

from gold_monitor.config import Settings
from gold_monitor.containers import build_container


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.price_handler.cache is container.cache
    assert container.news_service.cache is container.cache
    assert container.news_service.client is not None
    asyncio.run(container.close_resources())


def test_build_container_without_news_key(settings: Settings) -> None:
    container = build_container(settings.model_copy(update={"news_api_key": None}))

    assert container.news_service.client is None
    asyncio.run(container.close_resources())
