"""
Redis Cache Backend Module

Redis implementations of the cache interfaces, shared across application
instances. Values are stored as JSON strings; leaderboards are Redis
sorted sets. Every Redis failure is logged and reported through the
result instead of being raised.
"""

import json
from typing import Any, Dict

from redis.asyncio import Redis
from redis.exceptions import RedisError

from brainbolt.common.logger import app_logger
from .base import CacheBackend, CacheResult, RankedCache, RankedItems

logger = app_logger.getChild("cache.redis")


class RedisCacheBackend(CacheBackend):
    """
    Redis key/value cache backend.

    All keys are namespaced with ``key_prefix`` so ``clear`` only touches
    entries owned by this backend.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "bb:", name: str = "redis"):
        """
        Initialize the Redis cache backend.

        Args:
            redis_client: Shared asyncio Redis client (``decode_responses=True``)
            key_prefix: Prefix for all Redis keys
            name: Name for this cache backend
        """
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._name = name
        self._hits = 0
        self._misses = 0

    @property
    def name(self) -> str:
        return self._name

    def _build_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def get(self, key: str) -> CacheResult[Any]:
        redis_key = self._build_key(key)
        try:
            async with self._redis.pipeline(transaction=False) as pipe:
                pipe.get(redis_key)
                pipe.ttl(redis_key)
                raw, ttl = await pipe.execute()
        except RedisError as e:
            logger.warning(f"Redis error in get for {redis_key}: {e}")
            return CacheResult(success=False, source=self.name, error=str(e))

        if raw is None:
            self._misses += 1
            return CacheResult(success=False, hit=False, source=self.name, error="Key not found")

        try:
            value = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            self._misses += 1
            logger.warning(f"Discarding undecodable cache entry {redis_key}: {e}")
            return CacheResult(success=False, hit=False, source=self.name, error="Deserialization failed")

        self._hits += 1
        return CacheResult(
            success=True,
            value=value,
            hit=True,
            ttl=ttl if ttl and ttl > 0 else None,
            source=self.name
        )

    async def set(self, key: str, value: Any, ttl: int = 0) -> CacheResult[Any]:
        redis_key = self._build_key(key)
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Value for {redis_key} is not JSON serializable: {e}")
            return CacheResult(success=False, source=self.name, error="Serialization failed")

        try:
            await self._redis.set(redis_key, payload, ex=ttl if ttl > 0 else None)
        except RedisError as e:
            logger.warning(f"Redis error in set for {redis_key}: {e}")
            return CacheResult(success=False, source=self.name, error=str(e))

        return CacheResult(success=True, value=value, ttl=ttl if ttl > 0 else None, source=self.name)

    async def delete(self, key: str) -> bool:
        redis_key = self._build_key(key)
        try:
            return bool(await self._redis.delete(redis_key))
        except RedisError as e:
            logger.warning(f"Redis error in delete for {redis_key}: {e}")
            return False

    async def clear(self) -> bool:
        try:
            keys = [key async for key in self._redis.scan_iter(match=f"{self._key_prefix}*")]
            if keys:
                await self._redis.delete(*keys)
            return True
        except RedisError as e:
            logger.warning(f"Redis error in clear: {e}")
            return False

    async def get_stats(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        stats: Dict[str, Any] = {
            'backend': 'redis',
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': self._hits / total if total > 0 else 0,
        }
        try:
            info = await self._redis.info()
            stats['memory_used'] = info.get('used_memory', 0)
            stats['evicted_keys'] = info.get('evicted_keys', 0)
        except RedisError as e:
            stats['error'] = str(e)
        return stats


class RedisRankedCache(RankedCache):
    """Ranked cache backed by Redis sorted sets."""

    def __init__(self, redis_client: Redis, key_prefix: str = "bb:", name: str = "redis-ranked"):
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def _build_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def add(self, key: str, member: str, score: float) -> bool:
        try:
            await self._redis.zadd(self._build_key(key), {member: score})
            return True
        except RedisError as e:
            logger.warning(f"Redis error in zadd for {key}: {e}")
            return False

    async def add_max(self, key: str, member: str, score: float) -> bool:
        try:
            # GT updates existing members only upwards and still adds new ones
            await self._redis.zadd(self._build_key(key), {member: score}, gt=True)
            return True
        except RedisError as e:
            logger.warning(f"Redis error in zadd GT for {key}: {e}")
            return False

    async def add_many(self, key: str, items: Dict[str, float]) -> bool:
        if not items:
            return True
        try:
            await self._redis.zadd(self._build_key(key), dict(items))
            return True
        except RedisError as e:
            logger.warning(f"Redis error in bulk zadd for {key}: {e}")
            return False

    async def exists(self, key: str) -> CacheResult[bool]:
        try:
            present = bool(await self._redis.exists(self._build_key(key)))
        except RedisError as e:
            logger.warning(f"Redis error in exists for {key}: {e}")
            return CacheResult(success=False, value=False, source=self.name, error=str(e))
        return CacheResult(success=True, value=present, hit=present, source=self.name)

    async def top(self, key: str, limit: int) -> CacheResult[RankedItems]:
        if limit <= 0:
            return CacheResult(success=True, value=[], source=self.name)
        try:
            raw = await self._redis.zrevrange(self._build_key(key), 0, limit - 1, withscores=True)
        except RedisError as e:
            logger.warning(f"Redis error in zrevrange for {key}: {e}")
            return CacheResult(success=False, value=[], source=self.name, error=str(e))

        items = [(str(member), float(score)) for member, score in raw]
        return CacheResult(success=True, value=items, hit=bool(items), source=self.name)

    async def clear(self, key: str) -> bool:
        try:
            return bool(await self._redis.delete(self._build_key(key)))
        except RedisError as e:
            logger.warning(f"Redis error in delete for {key}: {e}")
            return False
