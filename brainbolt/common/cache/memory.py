"""
Memory Cache Backend Module

In-process implementations of the cache interfaces: a dictionary-based
key/value cache with TTL and LRU eviction, and a ranked cache for
leaderboards. Used for development, single-process deployments and tests.
"""

import copy
import itertools
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple

from brainbolt.common.logger import app_logger
from .base import CacheBackend, CacheResult, RankedCache, RankedItems

logger = app_logger.getChild("cache.memory")


class _Entry:
    __slots__ = ("value", "expires_at")

    def __init__(self, value: Any, expires_at: Optional[float]):
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryCacheBackend(CacheBackend):
    """
    In-memory key/value cache backend.

    Features:
    - Thread-safe operations
    - LRU eviction when reaching maximum size
    - Lazy expiry of entries on access
    - Values are deep-copied in and out, so callers never share state
      with the cache (mirrors the serialization boundary of Redis)
    """

    def __init__(
        self,
        max_size: int = 10000,
        name: str = "memory",
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the memory cache backend.

        Args:
            max_size: Maximum number of entries to store
            name: Name for this cache backend
            clock: Time source in seconds, injectable for tests
        """
        self._cache: "OrderedDict[str, _Entry]" = OrderedDict()
        self._lock = threading.RLock()
        self._max_size = max_size
        self._name = name
        self._clock = clock

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    @property
    def name(self) -> str:
        return self._name

    async def get(self, key: str) -> CacheResult[Any]:
        with self._lock:
            entry = self._cache.get(key)
            now = self._clock()

            if entry is None:
                self._misses += 1
                return CacheResult(success=False, hit=False, source=self.name, error="Key not found")

            if entry.is_expired(now):
                del self._cache[key]
                self._expirations += 1
                self._misses += 1
                return CacheResult(success=False, hit=False, source=self.name, error="Entry expired")

            self._cache.move_to_end(key)
            self._hits += 1
            ttl = int(entry.expires_at - now) if entry.expires_at is not None else None
            return CacheResult(
                success=True,
                value=copy.deepcopy(entry.value),
                hit=True,
                ttl=ttl,
                source=self.name
            )

    async def set(self, key: str, value: Any, ttl: int = 0) -> CacheResult[Any]:
        with self._lock:
            expires_at = self._clock() + ttl if ttl > 0 else None
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self._max_size:
                evicted, _ = self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Evicted least recently used key {evicted}")
            self._cache[key] = _Entry(copy.deepcopy(value), expires_at)
            return CacheResult(success=True, value=value, ttl=ttl if ttl > 0 else None, source=self.name)

    async def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    async def clear(self) -> bool:
        with self._lock:
            self._cache.clear()
            return True

    async def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                'backend': 'memory',
                'size': len(self._cache),
                'max_size': self._max_size,
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / total if total > 0 else 0,
                'evictions': self._evictions,
                'expirations': self._expirations
            }


class MemoryRankedCache(RankedCache):
    """
    In-memory ranked cache.

    Members with equal scores keep the order in which they were first added.
    """

    def __init__(self, name: str = "memory-ranked"):
        self._sets: Dict[str, Dict[str, Tuple[float, int]]] = {}
        self._lock = threading.RLock()
        self._counter = itertools.count()
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def _put(self, key: str, member: str, score: float, only_if_higher: bool) -> None:
        ranked = self._sets.setdefault(key, {})
        current = ranked.get(member)
        if current is None:
            ranked[member] = (float(score), next(self._counter))
        elif not only_if_higher or score > current[0]:
            ranked[member] = (float(score), current[1])

    async def add(self, key: str, member: str, score: float) -> bool:
        with self._lock:
            self._put(key, member, score, only_if_higher=False)
            return True

    async def add_max(self, key: str, member: str, score: float) -> bool:
        with self._lock:
            self._put(key, member, score, only_if_higher=True)
            return True

    async def add_many(self, key: str, items: Dict[str, float]) -> bool:
        with self._lock:
            for member, score in items.items():
                self._put(key, member, score, only_if_higher=False)
            return True

    async def exists(self, key: str) -> CacheResult[bool]:
        with self._lock:
            present = bool(self._sets.get(key))
            return CacheResult(success=True, value=present, hit=present, source=self.name)

    async def top(self, key: str, limit: int) -> CacheResult[RankedItems]:
        with self._lock:
            ranked = self._sets.get(key, {})
            ordered = sorted(ranked.items(), key=lambda item: (-item[1][0], item[1][1]))
            items = [(member, score) for member, (score, _) in ordered[:max(limit, 0)]]
            return CacheResult(success=True, value=items, hit=bool(items), source=self.name)

    async def clear(self, key: str) -> bool:
        with self._lock:
            return self._sets.pop(key, None) is not None
