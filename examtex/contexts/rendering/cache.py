"""
Render Cache

Content-keyed, time-expiring, capacity-bounded store of compiled HTML.

- Lazy expiry: an entry older than CACHE_TTL_SECONDS counts as absent and is removed
  on the next lookup of its key, never by a background sweep.
- Eviction: inserting into a full cache evicts exactly one entry, the one with the
  oldest created_at, found by a full scan (O(n) per insert at capacity).
- Thread safety: every operation holds the cache's lock, so one cache can be shared
  by concurrent render calls.

Keys come from make_cache_key(): mode, content length and a 32-bit rolling hash.
Two different contents can collide on the same key; that risk is accepted.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from examtex.contexts.rendering.config import DEFAULT_CACHE_CAPACITY, RenderMode
from examtex.contexts.rendering.logger import _log_debug

CACHE_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    """
    One cached render.

    Attributes:
        key: Cache key from make_cache_key()
        value: Compiled HTML
        created_at: Clock reading (seconds) when stored
        approximate_size: len(key) + len(value); instrumentation only
    """

    key: str
    value: str
    created_at: float
    approximate_size: int


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache counters."""

    hits: int
    misses: int
    sets: int
    evictions: int
    size: int
    max_entries: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


def content_hash(content: str) -> int:
    """
    32-bit signed rolling hash: h = h * 31 + code point, wrapped like int32.

    Fast and non-cryptographic.
    """
    h = 0
    for char in content:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def make_cache_key(content: str, mode: RenderMode) -> str:
    """
    Derive the cache key for content rendered in mode.

    Feature flags are not part of the key: callers rendering the same content with
    different RenderFeatures should give each flag set its own RenderCache.

    Example:
        >>> make_cache_key("abc", RenderMode.FULL)
        'latex_full_3_96354'
    """
    if not content:
        return f"latex_{mode.value}_0_0"
    return f"latex_{mode.value}_{len(content)}_{content_hash(content)}"


class RenderCache:
    """
    Bounded, time-expiring map from cache key to compiled HTML.

    Args:
        max_entries: Capacity (default: DEFAULT_CACHE_CAPACITY)
        ttl_seconds: Age after which an entry is treated as absent
        clock: Returns the current time in seconds (default: time.time)
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_CACHE_CAPACITY,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries < 1:
            raise ValueError(f"Cache max_entries must be at least 1, got {max_entries}")

        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._reset_counters()

    def _reset_counters(self) -> None:
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.evictions = 0

    def get(self, key: str) -> Optional[str]:
        """Return cached HTML for key, or None on a miss (absent or expired)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            if self.clock() - entry.created_at > self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                _log_debug(f"Cache entry expired: {key}")
                return None

            self.hits += 1
            return entry.value

    def set(self, key: str, value: str) -> None:
        """
        Store value under key.

        Overwriting an existing key never evicts; inserting a new key into a full
        cache evicts the single oldest entry first.
        """
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._evict_oldest()

            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                created_at=self.clock(),
                approximate_size=len(key) + len(value),
            )
            self.sets += 1

    def _evict_oldest(self) -> None:
        if not self._entries:
            return
        oldest = min(self._entries.values(), key=lambda entry: entry.created_at)
        del self._entries[oldest.key]
        self.evictions += 1
        _log_debug(f"Cache evicted oldest entry: {oldest.key}")

    def clear(self) -> None:
        """Drop every entry and reset counters."""
        with self._lock:
            self._entries.clear()
            self._reset_counters()

    def keys(self):
        with self._lock:
            return list(self._entries)

    def entry(self, key: str) -> Optional[CacheEntry]:
        """Stored entry for key, without expiry check or counter update."""
        with self._lock:
            return self._entries.get(key)

    @property
    def hit_rate(self) -> float:
        return self.stats().hit_rate

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self.hits,
                misses=self.misses,
                sets=self.sets,
                evictions=self.evictions,
                size=len(self._entries),
                max_entries=self.max_entries,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries


# Process-wide caches, one per capacity
_shared_caches: Dict[int, RenderCache] = {}
_shared_caches_lock = threading.Lock()


def get_shared_cache(max_entries: int = DEFAULT_CACHE_CAPACITY) -> RenderCache:
    """Return the process-shared cache for a capacity, creating it on first use."""
    with _shared_caches_lock:
        cache = _shared_caches.get(max_entries)
        if cache is None:
            cache = RenderCache(max_entries=max_entries)
            _shared_caches[max_entries] = cache
        return cache


def clear_shared_caches() -> None:
    """Forget every process-shared cache."""
    with _shared_caches_lock:
        _shared_caches.clear()
