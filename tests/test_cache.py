"""Tests for the in-memory TTL cache."""

from datetime import timedelta

from gold_monitor.services.cache import InMemoryCache
from tests.conftest import ManualClock


def test_get_returns_value_until_ttl_passes(
    cache: InMemoryCache, clock: ManualClock
) -> None:
    cache.set("k", {"price": 1}, ttl_seconds=10)
    assert cache.get("k") == {"price": 1}

    clock.advance(10)
    assert cache.get("k") == {"price": 1}

    clock.advance(0.001)
    assert cache.get("k") is None


def test_expired_entry_is_removed_on_read(
    cache: InMemoryCache, clock: ManualClock
) -> None:
    cache.set("k", "v", ttl_seconds=5)
    clock.advance(6)

    assert cache.age("k") is not None
    assert cache.get("k") is None
    assert cache.age("k") is None


def test_overwrite_replaces_value_and_expiry(
    cache: InMemoryCache, clock: ManualClock
) -> None:
    cache.set("k", "v1", ttl_seconds=100)
    clock.advance(5)
    cache.set("k", "v2", ttl_seconds=50)

    assert cache.get("k") == "v2"
    assert cache.time_until_expiry("k") == timedelta(seconds=50)
    assert cache.age("k") == timedelta(0)


def test_has_delete_and_clear(cache: InMemoryCache, clock: ManualClock) -> None:
    cache.set("a", 1, ttl_seconds=10)
    cache.set("b", 2, ttl_seconds=10)

    assert cache.has("a")
    cache.delete("a")
    assert not cache.has("a")
    cache.delete("missing")

    cache.clear()
    assert not cache.has("b")

    cache.set("c", 3, ttl_seconds=1)
    clock.advance(2)
    assert not cache.has("c")


def test_age_and_time_until_expiry(cache: InMemoryCache, clock: ManualClock) -> None:
    assert cache.age("k") is None
    assert cache.time_until_expiry("k") is None

    cache.set("k", "v", ttl_seconds=60)
    clock.advance(15)

    assert cache.age("k") == timedelta(seconds=15)
    assert cache.time_until_expiry("k") == timedelta(seconds=45)

    clock.advance(45)
    assert cache.time_until_expiry("k") is None


def test_default_clock_uses_wall_time() -> None:
    cache = InMemoryCache()
    cache.set("k", "v", ttl_seconds=60)

    assert cache.get("k") == "v"
    remaining = cache.time_until_expiry("k")
    assert remaining is not None
    assert timedelta(seconds=59) < remaining <= timedelta(seconds=60)
