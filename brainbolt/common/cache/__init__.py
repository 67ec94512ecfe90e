"""
Caching System

Key/value and ranked cache backends with in-memory and Redis
implementations. The cache is never authoritative: backends report
failures through their results and callers fall back to the database.
"""

from typing import Tuple

from brainbolt.common.cache.base import (
    CacheBackend,
    CacheResult,
    RankedCache,
    RankedItems
)
from brainbolt.common.cache.memory import MemoryCacheBackend, MemoryRankedCache
from brainbolt.common.cache.redis import RedisCacheBackend, RedisRankedCache
from brainbolt.common.logger import app_logger

logger = app_logger.getChild("cache")

__all__ = [
    'CacheBackend',
    'CacheResult',
    'RankedCache',
    'RankedItems',
    'MemoryCacheBackend',
    'MemoryRankedCache',
    'RedisCacheBackend',
    'RedisRankedCache',
    'build_caches',
]


def build_caches(settings) -> Tuple[CacheBackend, RankedCache]:
    """
    Create the key/value and ranked caches selected by the settings.

    Args:
        settings: Application settings

    Returns:
        Tuple of (key/value cache, ranked cache)
    """
    if settings.CACHE_USE_REDIS:
        from brainbolt.common.redis import get_redis_client

        client = get_redis_client(settings.REDIS_URL)
        logger.info("Using Redis cache backends")
        return (
            RedisCacheBackend(client, key_prefix=settings.CACHE_KEY_PREFIX),
            RedisRankedCache(client, key_prefix=settings.CACHE_KEY_PREFIX),
        )

    logger.info("Using in-memory cache backends")
    return MemoryCacheBackend(max_size=settings.CACHE_MEMORY_MAX_SIZE), MemoryRankedCache()
