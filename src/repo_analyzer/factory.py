"""Application factory for creating FastAPI instances.

This module provides the create_app factory function that:
- Configures the FastAPI application with appropriate settings
- Sets up middleware stack in the correct order
- Registers exception handlers and rate limiting
- Mounts API routers
- Configures metrics
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from repo_analyzer.api.router import router
from repo_analyzer.cache.rate_limit import setup_rate_limiting
from repo_analyzer.core.config import Settings, get_settings
from repo_analyzer.core.events import lifespan
from repo_analyzer.core.exceptions import setup_exception_handlers
from repo_analyzer.core.middleware import (
    LoggingMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from repo_analyzer.observability.metrics import setup_metrics


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().
    """
    if settings is None:
        settings = get_settings()

    docs_enabled = settings.is_non_production

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="GitHub login sessions and repository metrics for the Repo Analyzer dashboard",
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        debug=settings.app.debug,
    )

    # Lifespan and dependencies read the settings from here
    app.state.settings = settings

    setup_rate_limiting(app)
    setup_exception_handlers(app)
    _setup_middleware(app, settings)
    app.include_router(router)
    setup_metrics(app, settings)

    return app


def _setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware is executed in reverse order of addition. Order from the
    request's perspective:
    1. SecurityHeadersMiddleware
    2. RequestIDMiddleware
    3. LoggingMiddleware
    4. GZipMiddleware
    5. CORSMiddleware
    """
    # The dashboard runs on another origin and sends the session cookie
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.api.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Process-Time"],
        )

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.is_production)
