"""Unit tests for the GitHub OAuth clients.

Tests cover:
- Code exchange success and request payload
- Error bodies, malformed bodies, error statuses and timeouts
- Profile lookup with email fallback
- Non-fatal email lookup failures
"""

from __future__ import annotations

import httpx
import orjson
import pytest
import respx

from repo_analyzer.auth.exceptions import (
    IdentityFetchFailed,
    MalformedProviderResponse,
    ProviderExchangeError,
    UpstreamUnavailable,
)
from repo_analyzer.auth.models import AccessToken
from repo_analyzer.clients.github.oauth import (
    GitHubIdentityFetcher,
    GitHubTokenExchangeClient,
    select_primary_email,
)
from repo_analyzer.core.config.settings import GitHubSettings


pytestmark = pytest.mark.unit

TOKEN_URL = "https://github.com/login/oauth/access_token"  # noqa: S105
API_URL = "https://api.github.com"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def github_settings() -> GitHubSettings:
    return GitHubSettings(
        client_id="client-1",
        callback_url="http://localhost:5000/auth/github/callback",
        timeout=5.0,
    )


@pytest.fixture
async def exchanger(github_settings: GitHubSettings):
    client = GitHubTokenExchangeClient(github_settings, "client-secret")
    await client.initialize()
    yield client
    await client.shutdown()


@pytest.fixture
async def fetcher(github_settings: GitHubSettings):
    client = GitHubIdentityFetcher(github_settings)
    await client.initialize()
    yield client
    await client.shutdown()


# =============================================================================
# Token exchange
# =============================================================================


class TestTokenExchange:
    """Tests for GitHubTokenExchangeClient.exchange."""

    @respx.mock
    async def test_success(self, exchanger: GitHubTokenExchangeClient) -> None:
        """Should return the access token and send the expected payload."""
        route = respx.post(TOKEN_URL).mock(
            return_value=httpx.Response(
                200,
                json={"access_token": "gho_abc", "token_type": "bearer", "scope": "read:user"},
            )
        )

        token = await exchanger.exchange("xyz", "http://localhost:5000/auth/github/callback")

        assert token == AccessToken("gho_abc", "bearer", "read:user")
        request = route.calls.last.request
        assert request.headers["Accept"] == "application/json"
        assert orjson.loads(request.content) == {
            "client_id": "client-1",
            "client_secret": "client-secret",
            "code": "xyz",
            "redirect_uri": "http://localhost:5000/auth/github/callback",
        }

    @respx.mock
    async def test_error_body(self, exchanger: GitHubTokenExchangeClient) -> None:
        """Should raise ProviderExchangeError with GitHub's description."""
        respx.post(TOKEN_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "error": "bad_verification_code",
                    "error_description": "The code passed is incorrect or expired.",
                },
            )
        )

        with pytest.raises(ProviderExchangeError) as exc_info:
            await exchanger.exchange("expired")

        assert exc_info.value.error == "bad_verification_code"
        assert exc_info.value.message == "The code passed is incorrect or expired."
        assert exc_info.value.code == "exchange_failed"

    @respx.mock
    async def test_missing_token(self, exchanger: GitHubTokenExchangeClient) -> None:
        """Should raise MalformedProviderResponse without access_token."""
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json={"scope": ""}))

        with pytest.raises(MalformedProviderResponse):
            await exchanger.exchange("xyz")

    @respx.mock
    async def test_non_json_body(self, exchanger: GitHubTokenExchangeClient) -> None:
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(MalformedProviderResponse):
            await exchanger.exchange("xyz")

    @respx.mock
    async def test_server_error(self, exchanger: GitHubTokenExchangeClient) -> None:
        """Should raise UpstreamUnavailable for 5xx without an error body."""
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(UpstreamUnavailable, match="502"):
            await exchanger.exchange("xyz")

    @respx.mock
    async def test_timeout(self, exchanger: GitHubTokenExchangeClient) -> None:
        """Should raise UpstreamUnavailable on timeout."""
        respx.post(TOKEN_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(UpstreamUnavailable, match="timed out"):
            await exchanger.exchange("xyz")

    @respx.mock
    async def test_connection_error(self, exchanger: GitHubTokenExchangeClient) -> None:
        respx.post(TOKEN_URL).mock(side_effect=httpx.ConnectError("no route"))

        with pytest.raises(UpstreamUnavailable, match="ConnectError"):
            await exchanger.exchange("xyz")


# =============================================================================
# Identity
# =============================================================================


class TestIdentityFetcher:
    """Tests for GitHubIdentityFetcher.fetch."""

    @respx.mock(assert_all_called=False)
    async def test_profile_with_public_email(self, fetcher: GitHubIdentityFetcher) -> None:
        """Should not call /user/emails when the profile has an email."""
        user_route = respx.get(f"{API_URL}/user").mock(
            return_value=httpx.Response(
                200,
                json={
                    "id": 1,
                    "login": "octocat",
                    "name": "The Octocat",
                    "avatar_url": "https://avatars.example/u/1",
                    "email": "octo@example.com",
                },
            )
        )
        emails_route = respx.get(f"{API_URL}/user/emails")

        identity = await fetcher.fetch(AccessToken("gho_abc"))

        assert identity.id == 1
        assert identity.display_name == "The Octocat"
        assert identity.primary_email == "octo@example.com"
        assert not emails_route.called
        headers = user_route.calls.last.request.headers
        assert headers["Authorization"] == "token gho_abc"
        assert headers["Accept"] == "application/vnd.github+json"

    @respx.mock
    async def test_email_fallback(self, fetcher: GitHubIdentityFetcher) -> None:
        """Should pick the primary address from /user/emails."""
        respx.get(f"{API_URL}/user").mock(
            return_value=httpx.Response(200, json={"id": 1, "login": "octocat", "email": None})
        )
        respx.get(f"{API_URL}/user/emails").mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"email": "b@x.com", "primary": False},
                    {"email": "a@x.com", "primary": True},
                ],
            )
        )

        identity = await fetcher.fetch(AccessToken("gho_abc"))

        assert identity.primary_email == "a@x.com"
        assert identity.display_name == "octocat"

    @respx.mock
    async def test_email_failure_is_not_fatal(self, fetcher: GitHubIdentityFetcher) -> None:
        """Should complete without an email when /user/emails fails."""
        respx.get(f"{API_URL}/user").mock(
            return_value=httpx.Response(200, json={"id": 1, "login": "octocat"})
        )
        respx.get(f"{API_URL}/user/emails").mock(return_value=httpx.Response(403))

        identity = await fetcher.fetch(AccessToken("gho_abc"))

        assert identity.login == "octocat"
        assert identity.primary_email is None

    @respx.mock
    async def test_profile_failure(self, fetcher: GitHubIdentityFetcher) -> None:
        """Should raise IdentityFetchFailed when the profile is refused."""
        respx.get(f"{API_URL}/user").mock(
            return_value=httpx.Response(401, json={"message": "Bad credentials"})
        )

        with pytest.raises(IdentityFetchFailed, match="401"):
            await fetcher.fetch(AccessToken("gho_revoked"))

    @respx.mock
    async def test_profile_missing_fields(self, fetcher: GitHubIdentityFetcher) -> None:
        respx.get(f"{API_URL}/user").mock(return_value=httpx.Response(200, json={"id": 1}))

        with pytest.raises(IdentityFetchFailed):
            await fetcher.fetch(AccessToken("gho_abc"))


class TestSelectPrimaryEmail:
    """Tests for select_primary_email."""

    @pytest.mark.parametrize(
        ("emails", "expected"),
        [
            ([{"email": "a@x.com", "primary": True}], "a@x.com"),
            ([{"email": "b@x.com"}, {"email": "c@x.com"}], "b@x.com"),
            ([], None),
            ({"email": "a@x.com"}, None),
        ],
    )
    def test_selection(self, emails: object, expected: str | None) -> None:
        assert select_primary_email(emails) == expected
