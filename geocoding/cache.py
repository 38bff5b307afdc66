"""
In-process TTL caches in front of the provider cascade.

Both caches are bounded and evict in insertion order (FIFO, not LRU).
Expired entries are dropped lazily when they are read. They are only
touched from the event loop thread, so no locking is done here.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from core.constants import (
    QUERY_CACHE_MAX_SIZE,
    QUERY_CACHE_TTL_SECONDS,
    RESULT_CACHE_MAX_SIZE,
    RESULT_CACHE_PRECISION,
    RESULT_CACHE_TTL_SECONDS,
)
from geocoding.schemas import GeocodingResult, SearchResult

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    key: str
    value: V
    timestamp: float


class TTLCache(Generic[V]):
    """
    Bounded string-keyed cache with a fixed time-to-live.

    Parameters
    ----------
    max_size : int
        Maximum number of entries; the oldest inserted entry is evicted
        when a new key would exceed it.
    ttl_seconds : float
        Entries older than this are treated as absent.
    clock : callable
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        *,
        max_size: int,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            msg = "max_size must be at least 1"
            raise ValueError(msg)
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # Insertion order is the eviction order
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()

    def get_entry(self, key: str) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp > self.ttl_seconds:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            return None
        return entry.value

    def set_entry(self, key: str, value: V) -> None:
        if key in self._entries:
            # Re-insert so the refreshed entry moves to the back of the queue
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            # Remove oldest (first item)
            oldest_key, _ = self._entries.popitem(last=False)
            logger.debug("Cache full, evicted oldest entry: %s", oldest_key)
        self._entries[key] = CacheEntry(key=key, value=value, timestamp=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class ResultCache(TTLCache[GeocodingResult]):
    """Reverse geocoding results keyed by coordinates rounded to ~1 m."""

    def __init__(
        self,
        *,
        max_size: int = RESULT_CACHE_MAX_SIZE,
        ttl_seconds: float = RESULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(max_size=max_size, ttl_seconds=ttl_seconds, clock=clock)

    @staticmethod
    def make_key(lat: float, lng: float) -> str:
        precision = RESULT_CACHE_PRECISION
        return f"{lat:.{precision}f},{lng:.{precision}f}"

    def get(self, lat: float, lng: float) -> GeocodingResult | None:
        return self.get_entry(self.make_key(lat, lng))

    def set(self, lat: float, lng: float, result: GeocodingResult) -> None:
        if not result.success:
            logger.debug("Not caching failed geocoding result for %s,%s", lat, lng)
            return
        self.set_entry(self.make_key(lat, lng), result)


class QueryCache(TTLCache[list[SearchResult]]):
    """Forward search results keyed by the trimmed, lower-cased query."""

    def __init__(
        self,
        *,
        max_size: int = QUERY_CACHE_MAX_SIZE,
        ttl_seconds: float = QUERY_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(max_size=max_size, ttl_seconds=ttl_seconds, clock=clock)

    @staticmethod
    def make_key(query: str) -> str:
        return query.strip().lower()

    def get(self, query: str) -> list[SearchResult] | None:
        return self.get_entry(self.make_key(query))

    def set(self, query: str, results: list[SearchResult]) -> None:
        if not results:
            return
        self.set_entry(self.make_key(query), results)
