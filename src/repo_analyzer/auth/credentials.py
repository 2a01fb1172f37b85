"""Admin credential verification."""

from __future__ import annotations

import hmac
from typing import Protocol, runtime_checkable

from repo_analyzer.observability.logging import get_logger


logger = get_logger(__name__)


@runtime_checkable
class CredentialVerifier(Protocol):
    """Check a username/password pair for an admin login."""

    def verify(self, username: str, password: str) -> bool:
        """Return True if the pair is accepted."""
        ...


class StaticCredentialVerifier:
    """Compare against one configured username and password.

    An empty configured password disables admin login entirely.
    """

    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._password = password

    @property
    def enabled(self) -> bool:
        return bool(self._username and self._password)

    def verify(self, username: str, password: str) -> bool:
        if not self.enabled:
            logger.warning("Admin login attempted but no admin password is configured")
            return False

        # Evaluate both comparisons so timing does not reveal which one failed
        user_ok = hmac.compare_digest(username.encode(), self._username.encode())
        password_ok = hmac.compare_digest(password.encode(), self._password.encode())
        return user_ok and password_ok
