"""Interfaces of the GitHub back-channel collaborators.

The login flow depends on these protocols rather than on the httpx clients
so tests can substitute stubs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from repo_analyzer.auth.models import AccessToken, Identity


@runtime_checkable
class TokenExchangeClient(Protocol):
    """Exchange an authorization code for an access token."""

    async def exchange(self, code: str, redirect_uri: str | None = None) -> AccessToken:
        """Single back-channel call, never retried."""
        ...


@runtime_checkable
class IdentityFetcher(Protocol):
    """Load the identity behind an access token."""

    async def fetch(self, access_token: AccessToken) -> Identity:
        """Profile plus primary email."""
        ...
