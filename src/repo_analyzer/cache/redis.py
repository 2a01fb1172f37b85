"""Redis client and connection pool management.

This module provides:
- The async Redis connection pool shared by the state store and the
  repository metrics cache
- Connection lifecycle management via lifespan events
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from repo_analyzer.core.config import get_settings
from repo_analyzer.observability.logging import get_logger


if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)

_cache_pool: ConnectionPool[Any] | None = None
_cache_client: Redis[Any] | None = None


async def init_redis_pools() -> None:
    """Initialize the Redis connection pool and verify it answers.

    Should be called during application startup (lifespan).

    Raises:
        redis.ConnectionError: If Redis cannot be reached.
    """
    global _cache_pool, _cache_client  # noqa: PLW0603

    settings = get_settings()

    logger.info(
        "Initializing Redis connection",
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.cache_db,
    )

    _cache_pool = ConnectionPool.from_url(
        settings.redis_cache_url,
        max_connections=20,
        decode_responses=True,
    )
    _cache_client = redis.Redis(connection_pool=_cache_pool)

    try:
        await _cache_client.ping()
    except (redis.ConnectionError, redis.TimeoutError):
        logger.exception("Failed to connect to Redis")
        await close_redis_pools()
        raise

    logger.info("Redis connection established")


async def close_redis_pools() -> None:
    """Close the Redis connection pool.

    Should be called during application shutdown (lifespan). Safe to call
    when Redis was never initialized.
    """
    global _cache_pool, _cache_client  # noqa: PLW0603

    if _cache_client is None and _cache_pool is None:
        return

    logger.info("Closing Redis connections")

    if _cache_client:
        await _cache_client.aclose()
        _cache_client = None

    if _cache_pool:
        await _cache_pool.disconnect()
        _cache_pool = None

    logger.info("Redis connections closed")


def get_cache_client() -> Redis[Any]:
    """Get the cache Redis client.

    Raises:
        RuntimeError: If Redis is not initialized.
    """
    if _cache_client is None:
        msg = "Redis cache client not initialized. Call init_redis_pools() first."
        raise RuntimeError(msg)
    return _cache_client


def is_redis_initialized() -> bool:
    """Whether a Redis client is available."""
    return _cache_client is not None


async def check_redis_health() -> dict[str, str]:
    """Check health of the Redis connection.

    Returns:
        Mapping of Redis instance name to ``healthy``, ``unhealthy`` or
        ``not_initialized``.
    """
    results: dict[str, str] = {}

    try:
        if _cache_client:
            await _cache_client.ping()
            results["redis_cache"] = "healthy"
        else:
            results["redis_cache"] = "not_initialized"
    except (redis.ConnectionError, redis.TimeoutError):
        results["redis_cache"] = "unhealthy"

    return results
