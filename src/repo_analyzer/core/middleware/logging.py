"""Request logging middleware.

One line when a request starts and one when it completes, with its duration.
The duration is also returned in ``X-Process-Time``. Query strings are never
logged: the OAuth callback carries the authorization code and state in its
query.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from repo_analyzer.observability.logging import bind_context, get_logger

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

logger = get_logger(__name__)

QUIET_PATHS = frozenset({"/health", "/ready", "/metrics", "/favicon.ico"})

# A callback makes up to three sequential GitHub calls
SLOW_REQUEST_SECONDS = 3.0


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, considering proxies."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        # First entry is the original client
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Structured access log with timing."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        quiet_paths: frozenset[str] = QUIET_PATHS,
        slow_seconds: float = SLOW_REQUEST_SECONDS,
    ) -> None:
        super().__init__(app)
        self.quiet_paths = quiet_paths
        self.slow_seconds = slow_seconds

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        quiet = request.url.path in self.quiet_paths

        if not quiet:
            bind_context(
                method=request.method,
                path=request.url.path,
                client_ip=get_client_ip(request),
            )
            logger.info(
                "Request started",
                user_agent=request.headers.get("user-agent", "unknown"),
            )

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        duration_ms = round(elapsed * 1000, 2)
        response.headers["X-Process-Time"] = f"{duration_ms}ms"

        if elapsed > self.slow_seconds:
            logger.warning(
                "Slow request",
                method=request.method,
                path=request.url.path,
                duration_ms=duration_ms,
            )
        elif not quiet:
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

        return response
