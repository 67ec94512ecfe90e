"""
Base Cache Module

This module defines the interfaces shared by the cache backends: a
key/value backend with per-entry TTL and a ranked (sorted-set) backend
for leaderboards.

Backends never raise on infrastructure failures. They log the problem and
report it through ``CacheResult.success``/``error`` (or a ``False`` return),
because the durable store is always the source of truth and callers must
keep working with the cache down.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

V = TypeVar('V')

# (member, score) pairs, highest score first
RankedItems = List[Tuple[str, float]]


@dataclass
class CacheResult(Generic[V]):
    """
    Result of a cache operation.

    Attributes:
        success: Whether the operation was successful
        value: The value retrieved or stored
        hit: Whether the value was found in cache (for get operations)
        ttl: Remaining time-to-live in seconds
        source: Name of the backend that served the operation
        error: Optional error message if the operation failed
    """
    success: bool
    value: Optional[V] = None
    hit: bool = False
    ttl: Optional[int] = None
    source: Optional[str] = None
    error: Optional[str] = None


class CacheBackend(ABC):
    """Abstract key/value cache backend with per-entry TTL."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of this cache backend."""

    @abstractmethod
    async def get(self, key: str) -> CacheResult[Any]:
        """
        Retrieve a value from the cache.

        Args:
            key: The cache key

        Returns:
            CacheResult with ``hit`` set when the key was present
        """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int = 0) -> CacheResult[Any]:
        """
        Store a value in the cache.

        Args:
            key: The cache key
            value: A JSON-serializable value
            ttl: Time-to-live in seconds (0 means no expiration)

        Returns:
            CacheResult indicating success/failure
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key; True if something was deleted."""

    @abstractmethod
    async def clear(self) -> bool:
        """Remove every entry owned by this backend."""

    @abstractmethod
    async def get_stats(self) -> Dict[str, Any]:
        """Hit/miss counters and backend details."""


class RankedCache(ABC):
    """
    Abstract sorted-set cache: members ranked by a numeric score,
    read back highest first.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of this cache backend."""

    @abstractmethod
    async def add(self, key: str, member: str, score: float) -> bool:
        """Set ``member``'s score unconditionally."""

    @abstractmethod
    async def add_max(self, key: str, member: str, score: float) -> bool:
        """Set ``member``'s score only if it is new or higher than the current one."""

    @abstractmethod
    async def add_many(self, key: str, items: Dict[str, float]) -> bool:
        """Set several scores at once."""

    @abstractmethod
    async def exists(self, key: str) -> CacheResult[bool]:
        """Check whether a ranked set is present; ``hit`` is set when it is."""

    @abstractmethod
    async def top(self, key: str, limit: int) -> CacheResult[RankedItems]:
        """Read the ``limit`` highest-ranked members with their scores."""

    @abstractmethod
    async def clear(self, key: str) -> bool:
        """Drop a ranked set."""
