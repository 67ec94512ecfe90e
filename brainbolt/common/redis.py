"""
Redis Client Utility Module

Process-wide asyncio Redis client shared by the cache backends.
"""

from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from brainbolt.common.logger import app_logger

logger = app_logger.getChild("redis")

_redis_client: Optional[Redis] = None


def get_redis_client(url: str) -> Redis:
    """
    Get the shared Redis client, creating it on first use.

    The connection is established lazily by the first command, so this
    never blocks or fails on an unreachable server.

    Args:
        url: Redis connection URL

    Returns:
        Redis client instance
    """
    global _redis_client

    if _redis_client is None:
        _redis_client = Redis.from_url(url, decode_responses=True, socket_connect_timeout=5)
        logger.info("Created Redis client")
    return _redis_client


async def check_redis_connection(client: Redis) -> bool:
    """Ping Redis; False when the server cannot be reached."""
    try:
        return bool(await client.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False


async def close_redis_client() -> None:
    """Close the shared client; the next ``get_redis_client`` reconnects."""
    global _redis_client

    if _redis_client is not None:
        try:
            await _redis_client.aclose()
        except RedisError as e:
            logger.error(f"Error closing Redis connection: {e}")
        _redis_client = None
        logger.info("Redis client closed")
