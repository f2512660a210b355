"""
CacheManager - Async-compatible in-memory cache with per-key TTL.

Features:
- Memory-based cache living for the lifetime of the process
- Per-entry TTL in seconds; a TTL of 0 means the entry never expires
- Size cap that only ever evicts expiring entries
- Async lock around every mutation
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Generic, Protocol, TypeVar

from loguru import logger

T = TypeVar("T")

NO_EXPIRY = 0


class CacheStore(Protocol):
    """Minimal cache capability the character services depend on."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, data: Any, ttl: float | None = None) -> None: ...


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with metadata."""

    data: T
    timestamp: datetime
    ttl: float  # seconds, NO_EXPIRY for permanent entries

    @property
    def expires(self) -> bool:
        return self.ttl > NO_EXPIRY

    def is_expired(self, now: datetime) -> bool:
        """Check if entry is past its TTL."""
        return self.expires and now > self.timestamp + timedelta(seconds=self.ttl)


class CacheManager:
    """
    Async-compatible cache manager with per-key TTL.

    Usage:
        cache = CacheManager(max_size=100)

        # Try to get from cache
        character = await cache.get("entity_1")
        if character is not None:
            return character

        # Fetch fresh data and cache it for ten minutes
        character = await fetch_character("1")
        await cache.set("entity_1", character, ttl=600)

    When the cache is full, the oldest *expiring* entry makes room. Entries
    stored with ``NO_EXPIRY`` are never evicted, so the cap is a soft limit
    once only permanent entries remain. ``max_size=0`` disables the cap.
    """

    def __init__(
        self,
        max_size: int = 100,
        default_ttl: float = NO_EXPIRY,
        debug: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._memory: dict[str, CacheEntry[Any]] = {}
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._debug = debug
        self._clock = clock
        self._lock = asyncio.Lock()
        self._stats = CacheStats()

    async def get(self, key: str) -> Any | None:
        """
        Get value from cache.

        Returns the cached value if present and not expired, None otherwise.
        """
        async with self._lock:
            entry = self._memory.get(key)
            if entry is None:
                self._stats.misses += 1
                self._log(f"MISS: {key}")
                return None

            if entry.is_expired(self._clock()):
                del self._memory[key]
                self._stats.misses += 1
                self._log(f"EXPIRED: {key}")
                return None

            self._stats.hits += 1
            self._log(f"HIT: {key}")
            return entry.data

    async def set(
        self,
        key: str,
        data: Any,
        ttl: float | None = None,
    ) -> None:
        """
        Set value in cache.

        Args:
            key: Cache key
            data: Data to cache
            ttl: Seconds to live (uses default if not specified, 0 never expires)
        """
        ttl = self._default_ttl if ttl is None else ttl
        entry = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl)

        async with self._lock:
            if (
                self._max_size > 0
                and len(self._memory) >= self._max_size
                and key not in self._memory
            ):
                self._evict_oldest_expiring()

            self._memory[key] = entry
            self._log(f"SET: {key} (TTL: {ttl}s)")

    def _evict_oldest_expiring(self) -> None:
        """Evict the oldest entry that has a TTL. Caller holds the lock."""
        candidates = [k for k, v in self._memory.items() if v.expires]
        if not candidates:
            self._log("EVICT: only permanent entries, growing past max_size")
            return

        oldest_key = min(candidates, key=lambda k: self._memory[k].timestamp)
        del self._memory[oldest_key]
        self._stats.evictions += 1
        self._log(f"EVICT: {oldest_key}")

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.size = len(self._memory)
        self._stats.max_size = self._max_size
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[CacheManager] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }
