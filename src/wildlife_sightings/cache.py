"""In-memory response cache keyed by a viewport + filter fingerprint.

Entries expire after a TTL (checked on read). When a write pushes the store
past its size ceiling, the oldest entries are swept in one batch. There is no
background timer.

The cache is process-local. Every instance of the API server keeps its own, so
staleness is bounded only by the TTL.
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from wildlife_sightings.schemas import FilterParams, Observation, Viewport

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 100
DEFAULT_EVICT_COUNT = 20


def _rounded(value: float, digits: int) -> float:
    # Adding 0.0 folds -0.0 into 0.0 so both format the same.
    return round(value, digits) + 0.0


def cache_key(viewport: Viewport, filters: FilterParams | None = None) -> str:
    """
    Canonical fingerprint for a request.

    The center is rounded to 2 decimals (~1.1 km grid) and the spans to 3, so
    small pans reuse an entry. Filters are serialized with sorted keys and
    sorted set members, so field or member order never changes the key.
    """
    filters = filters or FilterParams()
    canonical_filters = {
        "has_photo": filters.has_photo,
        "providers": sorted(p.value for p in filters.providers),
        "recency": filters.recency.value if filters.recency else None,
        "taxa": sorted(t.value for t in filters.taxa),
    }
    viewport_part = (
        f"{_rounded(viewport.lat, 2)},{_rounded(viewport.lng, 2)},"
        f"{round(viewport.lat_delta, 3)},{round(viewport.lng_delta, 3)}"
    )
    return f"{viewport_part}|{json.dumps(canonical_filters, sort_keys=True, separators=(',', ':'))}"


@dataclass
class CacheEntry:
    observations: list[Observation]
    timestamp: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0


@dataclass
class ObservationCache:
    """TTL + capacity bounded store of aggregated observation lists.

    All reads and writes hold one lock, so the cache can be shared by the
    worker threads that serve concurrent requests.
    """

    ttl_seconds: float = DEFAULT_TTL_SECONDS
    max_entries: int = DEFAULT_MAX_ENTRIES
    evict_count: int = DEFAULT_EVICT_COUNT
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, CacheEntry] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _stats: CacheStats = field(default_factory=CacheStats, init=False, repr=False)

    def get(self, key: str) -> list[Observation] | None:
        """Cached list for ``key``, or None if missing or stale (stale is evicted)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                return None
            if self.clock() - entry.timestamp >= self.ttl_seconds:
                del self._entries[key]
                self._stats.misses += 1
                self._stats.evictions += 1
                return None
            self._stats.hits += 1
            return list(entry.observations)

    def set(self, key: str, observations: list[Observation]) -> None:
        """Store ``observations`` under ``key``, sweeping the oldest if over capacity."""
        with self._lock:
            self._entries[key] = CacheEntry(observations=list(observations), timestamp=self.clock())
            if len(self._entries) > self.max_entries:
                oldest = sorted(self._entries.items(), key=lambda item: item[1].timestamp)
                for stale_key, _ in oldest[: self.evict_count]:
                    del self._entries[stale_key]
                    self._stats.evictions += 1

    def clear(self) -> None:
        """Drop every entry and reset the counters."""
        with self._lock:
            self._entries.clear()
            self._stats = CacheStats()

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._stats.hits,
                "misses": self._stats.misses,
                "evictions": self._stats.evictions,
            }

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
