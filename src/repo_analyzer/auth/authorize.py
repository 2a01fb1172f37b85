"""GitHub authorize URL construction."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

from repo_analyzer.auth.models import AuthorizationRequest


if TYPE_CHECKING:
    from repo_analyzer.auth.models import CsrfState
    from repo_analyzer.core.config.settings import GitHubSettings


class AuthorizationRequestBuilder:
    """Build the URL the browser is redirected to when a login starts.

    ``redirect_uri`` must match a callback URL registered for the OAuth app.
    GitHub rejects a mismatch on its side; nothing is checked locally.
    """

    def __init__(self, github: GitHubSettings) -> None:
        self._github = github

    def request_for(self, csrf_state: CsrfState) -> AuthorizationRequest:
        return AuthorizationRequest(
            client_id=self._github.client_id,
            redirect_uri=self._github.callback_url,
            scope=self._github.scope,
            state=csrf_state.token,
        )

    def build(self, csrf_state: CsrfState) -> str:
        """Return the full authorize URL for a state token."""
        request = self.request_for(csrf_state)
        query = urlencode(
            {
                "client_id": request.client_id,
                "redirect_uri": request.redirect_uri,
                "scope": request.scope,
                "state": request.state,
            }
        )
        return f"{self._github.authorize_url}?{query}"
