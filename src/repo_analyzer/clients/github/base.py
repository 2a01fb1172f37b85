"""Shared HTTP plumbing for the GitHub clients."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from repo_analyzer.observability.logging import get_logger


if TYPE_CHECKING:
    from repo_analyzer.core.config.settings import GitHubSettings

logger = get_logger(__name__)

GITHUB_MEDIA_TYPE = "application/vnd.github+json"


class GitHubHTTPClient:
    """Owns an ``httpx.AsyncClient`` configured for GitHub.

    A client can be injected (tests, connection sharing); otherwise one is
    created by ``initialize()`` and closed by ``shutdown()``.
    """

    def __init__(
        self,
        settings: GitHubSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._owns_http_client = http_client is None

    @property
    def timeout(self) -> float:
        return self._settings.timeout

    async def initialize(self) -> None:
        """Create the HTTP client if none was provided."""
        if self._http is not None:
            return
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self._settings.timeout),
            headers={"User-Agent": self._settings.user_agent},
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )
        logger.info(
            f"{type(self).__name__} initialized",
            timeout=self._settings.timeout,
        )

    async def shutdown(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_http_client and self._http is not None:
            await self._http.aclose()
            self._http = None
            logger.debug(f"{type(self).__name__} shutdown")

    async def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            await self.initialize()
        assert self._http is not None
        return self._http

    def _api_headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {
            "Accept": GITHUB_MEDIA_TYPE,
            "User-Agent": self._settings.user_agent,
        }
        if access_token:
            headers["Authorization"] = f"token {access_token}"
        return headers

    def _api_url(self, path: str) -> str:
        return f"{self._settings.api_url.rstrip('/')}{path}"
