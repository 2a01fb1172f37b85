"""Shared test fixtures for the Repo Analyzer service tests."""

from __future__ import annotations

import os


# Must be set before repo_analyzer is imported: the rate limiter and the YAML
# settings source read it at import time.
os.environ["APP_ENV"] = "test"

from collections.abc import AsyncIterator, Callable, Iterator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from repo_analyzer.cache.rate_limit import limiter  # noqa: E402
from repo_analyzer.core.config import Settings, get_settings  # noqa: E402
from repo_analyzer.factory import create_app  # noqa: E402


TEST_SESSION_SECRET = "test-session-secret-key-0123456789abcdef"  # noqa: S105
TEST_ADMIN_PASSWORD = "test-admin-password"  # noqa: S105
TEST_CALLBACK_URL = "http://testserver/auth/github/callback"
TEST_FRONTEND_URL = "http://frontend.test"


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests: no Redis, known secrets, test GitHub app."""
    values: dict[str, Any] = {
        "APP_ENV": "test",
        "GITHUB_CLIENT_SECRET": "test-client-secret",
        "SESSION_SECRET_KEY": TEST_SESSION_SECRET,
        "ADMIN_PASSWORD": TEST_ADMIN_PASSWORD,
        "github": {"client_id": "test-client-id", "callback_url": TEST_CALLBACK_URL},
        "frontend": {"url": TEST_FRONTEND_URL},
        "redis": {"enabled": False},
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    """Reset rate limit counters and the settings cache between tests."""
    limiter.reset()
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build settings with overrides on top of the test defaults."""
    return make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    """Application with its lifespan started."""
    application = create_app(settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as http_client:
        yield http_client
