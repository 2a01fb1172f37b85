"""Unit tests for HTTP middleware.

Tests cover:
- Request ID propagation and generation
- Security headers and no-store caching rules
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from repo_analyzer.core.middleware import RequestIDMiddleware, SecurityHeadersMiddleware


pytestmark = pytest.mark.unit


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def middleware_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=False)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/api/thing")
    async def api_thing() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/public")
    async def public() -> dict[str, bool]:
        return {"ok": True}

    return app


@pytest.fixture
async def middleware_client(middleware_app: FastAPI):
    async with AsyncClient(
        transport=ASGITransport(app=middleware_app), base_url="http://testserver"
    ) as client:
        yield client


# =============================================================================
# Tests
# =============================================================================


class TestRequestIDMiddleware:
    """Tests for RequestIDMiddleware."""

    async def test_propagates_valid_id(self, middleware_client: AsyncClient) -> None:
        response = await middleware_client.get("/public", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    async def test_generates_id(self, middleware_client: AsyncClient) -> None:
        response = await middleware_client.get("/public")

        assert len(response.headers["X-Request-ID"]) == 36

    async def test_replaces_unsafe_id(self, middleware_client: AsyncClient) -> None:
        """Should not echo IDs that could inject into logs or headers."""
        response = await middleware_client.get(
            "/public", headers={"X-Request-ID": "bad id <script>"}
        )

        assert response.headers["X-Request-ID"] != "bad id <script>"
        assert len(response.headers["X-Request-ID"]) == 36


class TestSecurityHeadersMiddleware:
    """Tests for SecurityHeadersMiddleware."""

    async def test_hardening_headers(self, middleware_client: AsyncClient) -> None:
        response = await middleware_client.get("/public")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" not in response.headers
        assert "Cache-Control" not in response.headers

    async def test_api_responses_not_cached(self, middleware_client: AsyncClient) -> None:
        """Should mark session carrying responses no-store."""
        response = await middleware_client.get("/api/thing")

        assert response.headers["Cache-Control"].startswith("no-store")
