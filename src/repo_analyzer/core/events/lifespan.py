"""Application lifespan event handlers.

Startup builds the login components and stores them on ``app.state``:

- Redis (optional): the state store and the metrics cache use it when enabled
- the CSRF state store, Redis or in-memory per ``auth.state_store``
- the GitHub clients, the session materializer and the login flow
- admin credential verification and usage analytics

Shutdown closes the HTTP clients and Redis.
"""

from __future__ import annotations

import secrets
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from repo_analyzer.auth.analytics import UsageAnalytics
from repo_analyzer.auth.authorize import AuthorizationRequestBuilder
from repo_analyzer.auth.callback import CallbackValidator
from repo_analyzer.auth.credentials import StaticCredentialVerifier
from repo_analyzer.auth.flow import OAuthLoginFlow
from repo_analyzer.auth.session import SessionMaterializer
from repo_analyzer.auth.state import StateTokenGenerator
from repo_analyzer.auth.store import InMemoryAuthSessionStore, RedisAuthSessionStore
from repo_analyzer.cache.redis import close_redis_pools, get_cache_client, init_redis_pools
from repo_analyzer.clients.github.oauth import GitHubIdentityFetcher, GitHubTokenExchangeClient
from repo_analyzer.clients.github.repositories import RepositoryMetricsClient
from repo_analyzer.core.config import Settings, StateStoreBackend, get_settings
from repo_analyzer.observability.logging import get_logger, setup_logging


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI
    from redis.asyncio import Redis

    from repo_analyzer.auth.store import AuthSessionStore

logger = get_logger(__name__)


class ConfigurationError(RuntimeError):
    """Settings are not usable for this environment."""


def resolve_session_secret(settings: Settings) -> str:
    """Signing key for session cookies.

    Production refuses to start without one. Elsewhere a random key is
    generated, which logs everyone out on restart.
    """
    if settings.SESSION_SECRET_KEY:
        return settings.SESSION_SECRET_KEY
    if settings.is_production:
        msg = "SESSION_SECRET_KEY must be set in production"
        raise ConfigurationError(msg)
    logger.warning("SESSION_SECRET_KEY not set, using a random per-process key")
    return secrets.token_urlsafe(32)


def build_state_store(settings: Settings, cache_client: Redis[Any] | None) -> AuthSessionStore:
    """Pick the state store; fall back to memory when Redis is unavailable."""
    ttl = settings.auth.state_ttl_seconds
    if settings.state_store_enum == StateStoreBackend.REDIS:
        if cache_client is not None:
            return RedisAuthSessionStore(cache_client, ttl_seconds=ttl)
        logger.warning(
            "Redis state store configured but Redis is unavailable, "
            "falling back to in-memory state store"
        )
    return InMemoryAuthSessionStore(ttl_seconds=ttl)


async def _init_cache(settings: Settings) -> Redis[Any] | None:
    """Initialize Redis and return its client, or None."""
    if not settings.redis.enabled:
        logger.info("Redis disabled")
        return None
    try:
        await init_redis_pools()
        return get_cache_client()
    except Exception:
        logger.exception("Failed to initialize Redis - continuing without it")
        return None


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize all application services during startup."""
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    if not settings.github.client_id or not settings.GITHUB_CLIENT_SECRET:
        logger.warning("GitHub OAuth client id or secret not configured - logins will fail")

    cache_client = await _init_cache(settings)
    store = build_state_store(settings, cache_client)

    materializer = SessionMaterializer(
        secret_key=resolve_session_secret(settings),
        policy=settings.cookie_policy,
        cookies=settings.cookies,
        algorithm=settings.auth.session_algorithm,
    )

    exchanger = GitHubTokenExchangeClient(settings.github, settings.GITHUB_CLIENT_SECRET)
    fetcher = GitHubIdentityFetcher(settings.github)
    repository_client = RepositoryMetricsClient(settings.github, cache_client=cache_client)
    for client in (exchanger, fetcher, repository_client):
        await client.initialize()

    analytics = UsageAnalytics()

    app.state.state_store = store
    app.state.session_materializer = materializer
    app.state.analytics = analytics
    app.state.repository_client = repository_client
    app.state.github_clients = (exchanger, fetcher, repository_client)
    app.state.credential_verifier = StaticCredentialVerifier(
        settings.auth.admin_username,
        settings.ADMIN_PASSWORD,
    )
    app.state.login_flow = OAuthLoginFlow(
        generator=StateTokenGenerator(store),
        builder=AuthorizationRequestBuilder(settings.github),
        validator=CallbackValidator(store),
        exchanger=exchanger,
        fetcher=fetcher,
        materializer=materializer,
        redirect_uri=settings.github.callback_url,
        analytics=analytics,
    )

    logger.info(
        "Application startup complete",
        state_store=type(store).__name__,
        cookie_secure=settings.cookie_policy.secure,
        cookie_same_site=str(settings.cookie_policy.same_site),
    )


async def _shutdown(app: FastAPI) -> None:
    """Release connections during shutdown."""
    logger.info("Shutting down application")

    for client in getattr(app.state, "github_clients", ()):
        await client.shutdown()

    await close_redis_pools()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context manager."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()

    await _startup(app, settings)
    try:
        yield
    finally:
        await _shutdown(app)
