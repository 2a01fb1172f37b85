"""CSRF state token generation."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

from repo_analyzer.auth.models import CsrfState, utcnow
from repo_analyzer.observability.logging import get_logger, redact


if TYPE_CHECKING:
    from repo_analyzer.auth.store import AuthSessionStore

logger = get_logger(__name__)

# 32 random bytes, base64url encoded
TOKEN_BYTES = 32


class StateTokenGenerator:
    """Issue single-use nonces binding an authorize redirect to its callback."""

    def __init__(self, store: AuthSessionStore) -> None:
        self._store = store

    async def generate(self) -> CsrfState:
        """Create and store a fresh state token.

        Expired states of abandoned login attempts are swept first so the
        table stays bounded.
        """
        now = utcnow()
        await self._store.sweep(now)

        state = CsrfState(token=secrets.token_urlsafe(TOKEN_BYTES), created_at=now)
        await self._store.put(state)

        logger.debug("Generated OAuth state", state=redact(state.token))
        return state
