"""Redis connection management and rate limiting."""

from repo_analyzer.cache.rate_limit import (
    limiter,
    rate_limit_auth,
    setup_rate_limiting,
)
from repo_analyzer.cache.redis import (
    check_redis_health,
    close_redis_pools,
    get_cache_client,
    init_redis_pools,
    is_redis_initialized,
)


__all__ = [
    "check_redis_health",
    "close_redis_pools",
    "get_cache_client",
    "init_redis_pools",
    "is_redis_initialized",
    "limiter",
    "rate_limit_auth",
    "setup_rate_limiting",
]
