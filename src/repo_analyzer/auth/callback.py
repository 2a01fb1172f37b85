"""Validation of the GitHub OAuth callback.

The checks run in a fixed order:

1. ``error`` present: the provider declined (``ProviderDeclined``).
2. ``state`` missing, unknown, consumed or expired (``CsrfMismatch``).
3. ``code`` missing (``MissingAuthorizationCode``).

A provider error wins over a bad state because it is the more useful
diagnosis. Whatever the outcome, the echoed state is consumed on the first
attempt so a captured callback URL cannot be replayed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

from repo_analyzer.auth.exceptions import (
    CsrfMismatch,
    MissingAuthorizationCode,
    ProviderDeclined,
)
from repo_analyzer.auth.models import CallbackOutcome, CallbackResult, utcnow
from repo_analyzer.observability.logging import get_logger, redact


if TYPE_CHECKING:
    from collections.abc import Mapping

    from repo_analyzer.auth.store import AuthSessionStore

logger = get_logger(__name__)


class CallbackValidator:
    """Turn callback query parameters into an authorization code or an error."""

    def __init__(self, store: AuthSessionStore) -> None:
        self._store = store

    @staticmethod
    def parse(params: Mapping[str, str]) -> CallbackResult:
        return CallbackResult(
            code=params.get("code") or None,
            state=params.get("state") or None,
            error=params.get("error") or None,
            error_description=params.get("error_description") or None,
        )

    async def validate(self, params: Mapping[str, str]) -> CallbackResult:
        """Validate a callback and return it once a code is in hand.

        The state store is the only authority on the state, so concurrent
        login attempts from one browser are validated independently.

        Raises:
            ProviderDeclined: GitHub reported an error.
            CsrfMismatch: The state is not acceptable.
            MissingAuthorizationCode: No code was sent.
        """
        result = self.parse(params)

        if result.error:
            if result.state:
                await self._store.consume(result.state)
            logger.info(
                "OAuth callback rejected by provider",
                outcome=CallbackOutcome.REJECTED,
                error=result.error,
                error_description=result.error_description,
            )
            raise ProviderDeclined(result.error, result.error_description)

        await self._check_state(result.state)

        if not result.code:
            logger.warning(
                "OAuth callback without authorization code",
                outcome=CallbackOutcome.MISSING_CODE,
            )
            raise MissingAuthorizationCode

        logger.debug(
            "OAuth callback accepted",
            outcome=CallbackOutcome.CODE_RECEIVED,
            state=redact(result.state),
        )
        return result

    async def _check_state(self, received: str | None) -> None:
        if not received:
            self._reject("missing state", received)

        stored = await self._store.consume(received)

        if stored is None:
            self._reject("unknown state", received)
        if stored.consumed:
            self._reject("state already used", received)
        if stored.is_expired(self._store.ttl_seconds, utcnow()):
            self._reject("state expired", received)

    @staticmethod
    def _reject(reason: str, received: str | None) -> NoReturn:
        # Security event: full context in the log, generic message to the user
        logger.warning(
            "OAuth state validation failed",
            outcome=CallbackOutcome.CSRF_FAILURE,
            reason=reason,
            received_state=received,
        )
        raise CsrfMismatch(reason, received_state=received)
