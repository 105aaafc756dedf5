"""TTL cache for food search results."""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


class InMemoryCache(Cache):
    """Bounded in-process cache that evicts the oldest entry when full."""

    def __init__(self, max_entries: int = 512) -> None:
        self.max_entries = max_entries
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value, dropping the oldest entry beyond capacity."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        self._entries.pop(key, None)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)
