"""GitHub OAuth back-channel calls: code exchange and identity lookup.

Both calls run server side only. The code exchange needs the client secret
and is never retried: authorization codes are single use, so a retry after a
partial success would be refused by GitHub anyway.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from repo_analyzer.auth.exceptions import (
    IdentityFetchFailed,
    MalformedProviderResponse,
    ProviderExchangeError,
    UpstreamUnavailable,
)
from repo_analyzer.auth.models import AccessToken, Identity
from repo_analyzer.clients.github.base import GitHubHTTPClient
from repo_analyzer.observability.logging import get_logger


if TYPE_CHECKING:
    from repo_analyzer.core.config.settings import GitHubSettings

logger = get_logger(__name__)


class GitHubTokenExchangeClient(GitHubHTTPClient):
    """Exchange an authorization code for an access token."""

    def __init__(
        self,
        settings: GitHubSettings,
        client_secret: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(settings, http_client)
        self._client_secret = client_secret

    async def exchange(self, code: str, redirect_uri: str | None = None) -> AccessToken:
        """POST the code to GitHub's token endpoint.

        Raises:
            ProviderExchangeError: GitHub answered with an ``error`` body.
            MalformedProviderResponse: The answer has no ``access_token``.
            UpstreamUnavailable: GitHub could not be reached or answered
                with an error status.
        """
        client = await self._client()
        payload = {
            "client_id": self._settings.client_id,
            "client_secret": self._client_secret,
            "code": code,
            "redirect_uri": redirect_uri or self._settings.callback_url,
        }

        try:
            response = await client.post(
                self._settings.token_url,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=self._settings.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("GitHub token exchange timed out", timeout=self.timeout)
            msg = f"GitHub token exchange timed out after {self.timeout}s"
            raise UpstreamUnavailable(msg) from e
        except httpx.RequestError as e:
            logger.warning("GitHub token exchange connection error", error=str(e))
            msg = f"Cannot connect to GitHub: {type(e).__name__}"
            raise UpstreamUnavailable(msg) from e

        data = _json_or_none(response)

        if isinstance(data, dict) and data.get("error"):
            error = str(data["error"])
            description = data.get("error_description")
            logger.warning(
                "GitHub rejected the authorization code",
                error=error,
                error_description=description,
                status_code=response.status_code,
            )
            raise ProviderExchangeError(str(description or error), error=error)

        if not response.is_success:
            logger.warning(
                "GitHub token endpoint returned an error status",
                status_code=response.status_code,
            )
            msg = f"GitHub token endpoint returned {response.status_code}"
            raise UpstreamUnavailable(msg)

        if not isinstance(data, dict) or not data.get("access_token"):
            logger.warning("GitHub token response has no access_token")
            raise MalformedProviderResponse

        logger.info("GitHub access token obtained", scope=data.get("scope", ""))
        return AccessToken(
            value=str(data["access_token"]),
            token_type=str(data.get("token_type") or "bearer"),
            scope=str(data.get("scope") or ""),
        )


class GitHubIdentityFetcher(GitHubHTTPClient):
    """Read the authenticated user's profile and primary email."""

    async def fetch(self, access_token: AccessToken) -> Identity:
        """Load the profile, then the email list if the profile hides the email.

        A failing email lookup only costs the email. A failing profile lookup
        aborts the login.

        Raises:
            IdentityFetchFailed: The profile could not be read.
        """
        client = await self._client()
        headers = self._api_headers(access_token.value)

        try:
            response = await client.get(self._api_url("/user"), headers=headers)
            response.raise_for_status()
            profile = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "GitHub profile request failed",
                status_code=e.response.status_code,
            )
            msg = f"GitHub returned {e.response.status_code} for the user profile"
            raise IdentityFetchFailed(msg) from e
        except httpx.HTTPError as e:
            logger.warning("GitHub profile request error", error=str(e))
            msg = f"Cannot read GitHub profile: {type(e).__name__}"
            raise IdentityFetchFailed(msg) from e
        except ValueError as e:
            raise IdentityFetchFailed("GitHub profile is not valid JSON") from e

        if not isinstance(profile, dict) or "id" not in profile or "login" not in profile:
            raise IdentityFetchFailed("GitHub profile is missing id or login")

        email = profile.get("email") or None
        if email is None:
            email = await self._fetch_primary_email(client, headers)

        login = str(profile["login"])
        return Identity(
            id=int(profile["id"]),
            login=login,
            display_name=profile.get("name") or login,
            avatar_url=profile.get("avatar_url"),
            primary_email=email,
        )

    async def _fetch_primary_email(
        self,
        client: httpx.AsyncClient,
        headers: dict[str, str],
    ) -> str | None:
        try:
            response = await client.get(self._api_url("/user/emails"), headers=headers)
            response.raise_for_status()
            emails = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("GitHub email lookup failed, continuing without email", error=str(e))
            return None

        return select_primary_email(emails)


def select_primary_email(emails: Any) -> str | None:
    """Pick the primary address, else the first one, else None."""
    if not isinstance(emails, list):
        return None
    entries = [e for e in emails if isinstance(e, dict) and e.get("email")]
    for entry in entries:
        if entry.get("primary"):
            return str(entry["email"])
    return str(entries[0]["email"]) if entries else None


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
