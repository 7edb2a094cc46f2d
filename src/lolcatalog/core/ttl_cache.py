"""Time-based memoization for derived query results."""

from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with the time it was stored."""

    value: T
    stored_at: datetime


class TTLCache(Generic[T]):
    """TTL cache with LRU eviction and an injected clock.

    Entries are shared state on the event loop thread; no locking is done.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], datetime], max_size: int = 1000, name: str = "cache"):
        """Initialize cache.

        Args:
            ttl_seconds: Lifetime of an entry
            clock: Source of the current time
            max_size: Maximum entries before LRU eviction
            name: Cache name for diagnostics
        """
        self.ttl = ttl_seconds
        self.clock = clock
        self.max_size = max_size
        self.name = name

        self._entries: OrderedDict[Hashable, CacheEntry[T]] = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: Hashable) -> T | None:
        """Get a live value, or None on a miss or expiry."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if (self.clock() - entry.stored_at).total_seconds() >= self.ttl:
            del self._entries[key]
            self._misses += 1
            return None

        self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    def set(self, key: Hashable, value: T) -> None:
        """Store a value, evicting the least recently used entries if full."""
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
            self._evictions += 1
        self._entries[key] = CacheEntry(value=value, stored_at=self.clock())

    def clear(self) -> int:
        """Clear all entries. Returns number cleared."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total = self._hits + self._misses
        return {
            "name": self.name,
            "size": len(self._entries),
            "max_size": self.max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total else 0.0,
            "evictions": self._evictions,
            "ttl_seconds": self.ttl,
        }
