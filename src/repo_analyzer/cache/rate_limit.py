"""Rate limiting using SlowAPI.

Limits are stored in Redis when it is enabled and in process memory
otherwise. Login endpoints use a stricter, IP keyed limit to slow down
password guessing against the admin login.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from slowapi import Limiter
from slowapi.util import get_remote_address

from repo_analyzer.core.config import get_settings
from repo_analyzer.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request

logger = get_logger(__name__)


def _get_auth_rate_limit_key(request: Request) -> str:
    """Rate limit key for login endpoints, always the client IP."""
    return f"auth:{get_remote_address(request)}"


def create_limiter() -> Limiter:
    """Create and configure the rate limiter."""
    settings = get_settings()

    if settings.redis.enabled:
        storage_uri = settings.redis_rate_limit_url
    else:
        storage_uri = "memory://"

    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limiting.default],
        storage_uri=storage_uri,
        strategy="fixed-window",
        headers_enabled=True,
        in_memory_fallback_enabled=settings.redis.enabled,
    )


# Global limiter instance, decorators bind to it at import time
limiter = create_limiter()


def setup_rate_limiting(app: FastAPI) -> None:
    """Attach the limiter to the application.

    The 429 response itself is rendered by the exception handlers in
    ``repo_analyzer.core.exceptions``.
    """
    app.state.limiter = limiter
    logger.info("Rate limiting configured")


def rate_limit_auth() -> Any:
    """Apply the login rate limit (stricter, IP-based).

    Example:
        @router.post("/admin/login")
        @rate_limit_auth()
        async def admin_login(request: Request, response: Response):
            ...
    """
    settings = get_settings()
    return limiter.limit(settings.rate_limiting.auth, key_func=_get_auth_rate_limit_key)
