"""Bounded TTL cache of raw step responses."""

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from litefetch.config import CacheConfig
from litefetch.logging import EngineLogger


@dataclass(frozen=True)
class CacheEntry:
    """Raw body and the clock reading when it was stored."""

    body: str
    timestamp: float


@dataclass(frozen=True)
class CacheLookup:
    """Outcome of a lookup: ``hit``, ``miss`` or ``expired``."""

    result: str
    entry: CacheEntry | None = None
    age_seconds: float = 0.0

    @property
    def hit(self) -> bool:
        return self.entry is not None


class StepCache:
    """Thread-safe TTL cache keyed by request fingerprint.

    Eviction is oldest-timestamp first, not least-recently-used: reads do
    not refresh an entry. Before a new key is inserted into a full cache,
    the oldest ``evict_fraction`` of entries are dropped, so the cache never
    holds more than ``max_entries``.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        logger: EngineLogger | None = None,
    ):
        """Initialize cache.

        Args:
            config: Cache limits (defaults to CacheConfig())
            clock: Seconds source; tests inject a fake clock
            logger: Optional EngineLogger
        """
        self._config = config or CacheConfig()
        self._clock = clock
        self._logger = logger
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "expired": 0, "evictions": 0, "rejected": 0}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def lookup(self, key: str, ttl_minutes: int) -> CacheLookup:
        """Look up a fresh entry, evicting it when stale.

        Args:
            key: Request fingerprint
            ttl_minutes: Freshness window; <= 0 never hits

        Returns:
            CacheLookup describing the outcome
        """
        if ttl_minutes <= 0:
            return CacheLookup("miss")

        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return CacheLookup("miss")

            age = now - entry.timestamp
            if age < ttl_minutes * 60:
                self._stats["hits"] += 1
                return CacheLookup("hit", entry, age)

            del self._entries[key]
            self._stats["expired"] += 1
            return CacheLookup("expired")

    def get(self, key: str, ttl_minutes: int) -> str | None:
        """Fresh body for ``key`` or None."""
        found = self.lookup(key, ttl_minutes)
        return found.entry.body if found.entry else None

    def put(self, key: str, body: str) -> bool:
        """Store a body unless it exceeds the size limit.

        Args:
            key: Request fingerprint
            body: Raw decoded response body

        Returns:
            True if stored
        """
        size = len(body.encode("utf-8"))
        if size > self._config.max_body_bytes:
            with self._lock:
                self._stats["rejected"] += 1
            if self._logger:
                self._logger.cache_rejected(key, size, self._config.max_body_bytes)
            return False

        evicted = 0
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._config.max_entries:
                evicted = self._evict_oldest_locked()
            self._entries[key] = CacheEntry(body, self._clock())
            remaining = len(self._entries)

        if evicted and self._logger:
            self._logger.cache_evicted(evicted, remaining)
        return True

    def _evict_oldest_locked(self) -> int:
        count = max(1, math.ceil(len(self._entries) * self._config.evict_fraction))
        oldest = sorted(self._entries.items(), key=lambda item: item[1].timestamp)[:count]
        for key, _ in oldest:
            del self._entries[key]
        self._stats["evictions"] += len(oldest)
        return len(oldest)

    def clear(self, prefix: str | None = None) -> int:
        """Remove every entry, or only keys starting with ``prefix``.

        Returns:
            Number of entries removed
        """
        with self._lock:
            if prefix is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                keys = [k for k in self._entries if k.startswith(prefix)]
                for key in keys:
                    del self._entries[key]
                removed = len(keys)

        if self._logger:
            self._logger.cache_cleared(prefix, removed)
        return removed

    def stats(self) -> dict[str, int]:
        """Counters plus the current size."""
        with self._lock:
            return {**self._stats, "size": len(self._entries)}
