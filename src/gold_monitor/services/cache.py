"""Simple cache abstractions."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

Clock = Callable[[], datetime]


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL in seconds."""

    def has(self, key: str) -> bool:
        """Return whether an unexpired value exists for the key."""

    def delete(self, key: str) -> None:
        """Remove a cached value."""

    def clear(self) -> None:
        """Remove every cached value."""

    def age(self, key: str) -> timedelta | None:
        """Return how long ago the value was stored."""

    def time_until_expiry(self, key: str) -> timedelta | None:
        """Return the remaining lifetime of the value, if positive."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _CacheEntry:
    value: object
    stored_at: datetime
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache with lazy expiry on read.

    Entries are only removed when a read finds them expired or on explicit
    ``delete``/``clear``. Concurrent writers to the same key are last-write-wins.
    """

    _entries: dict[str, _CacheEntry]
    _clock: Clock

    def __init__(self, clock: Clock | None = None) -> None:
        self._entries = {}
        self._clock = clock or _utc_now

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL, replacing any existing entry."""
        stored_at = self._clock()
        expires_at = stored_at + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(
            value=value, stored_at=stored_at, expires_at=expires_at
        )

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def age(self, key: str) -> timedelta | None:
        """Return time elapsed since the entry was stored."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._clock() - entry.stored_at

    def time_until_expiry(self, key: str) -> timedelta | None:
        """Return remaining lifetime, or None once it is no longer positive."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        remaining = entry.expires_at - self._clock()
        if remaining <= timedelta(0):
            return None
        return remaining
