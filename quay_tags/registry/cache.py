"""In-memory, TTL-bounded cache of tag-listing results.

A single :data:`shared_cache` is created when this module is first imported
and lives until the process exits. Every :class:`~quay_tags.registry.client.TagClient`
built without an explicit ``cache`` argument shares it by reference, so two
clients with the same credentials see the same entries. Tests should build
their own :class:`TagCache` instead.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from quay_tags.registry.models import Tag

#: Lifetime of a cache entry, in seconds.
CACHE_TTL = 5 * 60


@dataclass(frozen=True)
class CacheEntry:
    """A snapshot of a successful fetch.

    Attributes:
        tags: Tags in recency order.
        created_at: Clock reading taken when the entry was stored.
    """

    tags: tuple[Tag, ...]
    created_at: float


def is_expired(now: float, created_at: float, ttl: float = CACHE_TTL) -> bool:
    """Return whether an entry created at *created_at* is stale at *now*."""
    return now - created_at > ttl


class TagCache:
    """Thread-safe key/value store of :class:`CacheEntry` objects.

    The store makes no eviction decisions of its own: callers decide when a
    stale entry is removed.

    Args:
        clock: Monotonic time source, in seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, tags: Iterable[Tag]) -> CacheEntry:
        """Store *tags* under *key*, replacing any previous entry."""
        entry = CacheEntry(tags=tuple(tags), created_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def is_expired(self, entry: CacheEntry, now: float | None = None) -> bool:
        """Check *entry* against the fixed TTL using this cache's clock."""
        if now is None:
            now = self._clock()
        return is_expired(now, entry.created_at)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


shared_cache = TagCache()
