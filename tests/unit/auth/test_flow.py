"""Unit tests for the GitHub login flow.

Tests cover:
- Start: independent states embedded in the authorize URL
- Complete: happy path through every stage
- Short-circuiting: a failed stage stops every later stage
- No partial sessions on failure
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlsplit

import pytest
from starlette.responses import Response

from repo_analyzer.auth.analytics import UsageAnalytics
from repo_analyzer.auth.authorize import AuthorizationRequestBuilder
from repo_analyzer.auth.callback import CallbackValidator
from repo_analyzer.auth.exceptions import (
    CsrfMismatch,
    IdentityFetchFailed,
    ProviderDeclined,
    ProviderExchangeError,
)
from repo_analyzer.auth.flow import OAuthLoginFlow
from repo_analyzer.auth.models import AccessToken, Identity, SessionKind
from repo_analyzer.auth.session import SessionMaterializer
from repo_analyzer.auth.state import StateTokenGenerator
from repo_analyzer.auth.store import InMemoryAuthSessionStore
from repo_analyzer.core.config import CookiePolicy, SameSite
from repo_analyzer.core.config.settings import CookieSettings, GitHubSettings


pytestmark = pytest.mark.unit

REDIRECT_URI = "http://localhost:5000/auth/github/callback"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def exchanger() -> AsyncMock:
    mock = AsyncMock()
    mock.exchange = AsyncMock(return_value=AccessToken("gho_abc"))
    return mock


@pytest.fixture
def fetcher() -> AsyncMock:
    mock = AsyncMock()
    mock.fetch = AsyncMock(
        return_value=Identity(id=7, login="octocat", display_name="Octo", primary_email="a@x.com")
    )
    return mock


@pytest.fixture
def analytics() -> UsageAnalytics:
    return UsageAnalytics()


@pytest.fixture
def flow(
    memory_store: InMemoryAuthSessionStore,
    exchanger: AsyncMock,
    fetcher: AsyncMock,
    analytics: UsageAnalytics,
) -> OAuthLoginFlow:
    """Login flow with real state handling and stubbed GitHub calls."""
    github = GitHubSettings(client_id="client-1", callback_url=REDIRECT_URI)
    return OAuthLoginFlow(
        generator=StateTokenGenerator(memory_store),
        builder=AuthorizationRequestBuilder(github),
        validator=CallbackValidator(memory_store),
        exchanger=exchanger,
        fetcher=fetcher,
        materializer=SessionMaterializer(
            secret_key="flow-test-secret-key-0123456789abcdef",
            policy=CookiePolicy(secure=False, same_site=SameSite.LAX, max_age=3600),
            cookies=CookieSettings(),
        ),
        redirect_uri=REDIRECT_URI,
        analytics=analytics,
    )


def cookie_names(response: Response) -> set[str]:
    """Names of cookies set (not deleted) by ``response``."""
    return {
        h.split("=", 1)[0]
        for h in response.headers.getlist("set-cookie")
        if "Max-Age=0" not in h
    }


# =============================================================================
# Tests
# =============================================================================


class TestStart:
    """Tests for OAuthLoginFlow.start."""

    async def test_returns_authorize_url_with_state(
        self, flow: OAuthLoginFlow, memory_store: InMemoryAuthSessionStore
    ) -> None:
        """Should embed the issued state in the authorize URL."""
        with patch("repo_analyzer.auth.state.secrets.token_urlsafe", return_value="abc123"):
            url = await flow.start()

        query = parse_qs(urlsplit(url).query)
        assert query["state"] == ["abc123"]
        assert query["client_id"] == ["client-1"]
        assert await memory_store.get("abc123") is not None

    async def test_concurrent_attempts_are_independent(
        self, flow: OAuthLoginFlow, exchanger: AsyncMock
    ) -> None:
        """Should complete an earlier attempt after a later one has started."""
        first = parse_qs(urlsplit(await flow.start()).query)["state"][0]
        second = parse_qs(urlsplit(await flow.start()).query)["state"][0]
        response = Response()

        session = await flow.complete({"code": "xyz", "state": first}, response)

        assert first != second
        assert session.identity.login == "octocat"
        assert cookie_names(response) == {"session", "session_user"}
        await flow.complete({"code": "uvw", "state": second}, Response())
        assert exchanger.exchange.await_count == 2


class TestComplete:
    """Tests for OAuthLoginFlow.complete."""

    async def test_happy_path(
        self,
        flow: OAuthLoginFlow,
        exchanger: AsyncMock,
        analytics: UsageAnalytics,
    ) -> None:
        """Should exchange the code, fetch the identity and set the session."""
        with patch("repo_analyzer.auth.state.secrets.token_urlsafe", return_value="abc123"):
            await flow.start()
        response = Response()

        session = await flow.complete({"code": "xyz", "state": "abc123"}, response)

        exchanger.exchange.assert_awaited_once_with("xyz", REDIRECT_URI)
        assert session.kind == SessionKind.PROVIDER
        assert session.identity.login == "octocat"
        assert session.identity.primary_email == "a@x.com"
        assert cookie_names(response) == {"session", "session_user"}
        assert analytics.snapshot().total_logins == 1

    async def test_provider_error_stops_before_exchange(
        self,
        flow: OAuthLoginFlow,
        exchanger: AsyncMock,
        fetcher: AsyncMock,
    ) -> None:
        """Should not call GitHub when the user declined."""
        url = await flow.start()
        state = parse_qs(urlsplit(url).query)["state"][0]
        response = Response()

        with pytest.raises(ProviderDeclined):
            await flow.complete({"error": "access_denied", "state": state}, response)

        exchanger.exchange.assert_not_awaited()
        fetcher.fetch.assert_not_awaited()
        assert cookie_names(response) == set()

    async def test_csrf_failure_stops_before_exchange(
        self, flow: OAuthLoginFlow, exchanger: AsyncMock
    ) -> None:
        """Should not exchange a code that arrived with a forged state."""
        await flow.start()

        with pytest.raises(CsrfMismatch):
            await flow.complete({"code": "xyz", "state": "forged"}, Response())

        exchanger.exchange.assert_not_awaited()

    async def test_exchange_failure_leaves_no_session(
        self,
        flow: OAuthLoginFlow,
        exchanger: AsyncMock,
        fetcher: AsyncMock,
        analytics: UsageAnalytics,
    ) -> None:
        """Should stop before fetching the identity and set no cookies."""
        exchanger.exchange.side_effect = ProviderExchangeError(
            "The code passed is incorrect or expired.", error="bad_verification_code"
        )
        url = await flow.start()
        state = parse_qs(urlsplit(url).query)["state"][0]
        response = Response()

        with pytest.raises(ProviderExchangeError):
            await flow.complete({"code": "xyz", "state": state}, response)

        fetcher.fetch.assert_not_awaited()
        assert cookie_names(response) == set()
        assert analytics.snapshot().total_logins == 0

    async def test_identity_failure_leaves_no_session(
        self, flow: OAuthLoginFlow, fetcher: AsyncMock
    ) -> None:
        """Should set no cookies when the profile cannot be read."""
        fetcher.fetch.side_effect = IdentityFetchFailed()
        url = await flow.start()
        state = parse_qs(urlsplit(url).query)["state"][0]
        response = Response()

        with pytest.raises(IdentityFetchFailed):
            await flow.complete({"code": "xyz", "state": state}, response)

        assert cookie_names(response) == set()

    async def test_state_cannot_be_reused(self, flow: OAuthLoginFlow) -> None:
        """Should reject a replayed callback after a successful login."""
        url = await flow.start()
        params = {"code": "xyz", "state": parse_qs(urlsplit(url).query)["state"][0]}
        await flow.complete(params, Response())

        with pytest.raises(CsrfMismatch):
            await flow.complete(params, Response())
