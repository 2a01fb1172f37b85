"""Exceptions raised by the GitHub login flow.

Every failure is terminal for the login attempt in progress; none of them is
retried. Each carries a machine readable ``code`` used in the frontend error
redirect and a human readable ``message``.
"""

from __future__ import annotations


class OAuthFlowError(Exception):
    """Base exception for a failed login attempt.

    Attributes:
        code: Stable machine readable error code.
        message: Human readable description.
    """

    code = "oauth_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Message that is safe to show to the browser."""
        return self.message


class ProviderDeclined(OAuthFlowError):
    """The user or GitHub rejected the authorization request."""

    code = "provider_declined"

    def __init__(self, error: str, error_description: str | None = None) -> None:
        self.error = error
        self.error_description = error_description
        super().__init__(error_description or error)


class CsrfMismatch(OAuthFlowError):
    """The callback state is missing, unknown, consumed or expired.

    Treated as a possible forgery. The detailed reason is kept for logs only;
    the browser sees a generic message.
    """

    code = "csrf_mismatch"

    def __init__(self, reason: str, received_state: str | None = None) -> None:
        self.reason = reason
        self.received_state = received_state
        super().__init__(reason)

    @property
    def public_message(self) -> str:
        return "Please try logging in again."


class MissingAuthorizationCode(OAuthFlowError):
    """The callback carried a valid state but no authorization code."""

    code = "missing_code"

    def __init__(self, message: str = "No authorization code received") -> None:
        super().__init__(message)


class ProviderExchangeError(OAuthFlowError):
    """GitHub answered the code exchange with an error body."""

    code = "exchange_failed"

    def __init__(self, message: str, error: str | None = None) -> None:
        self.error = error
        super().__init__(message)


class MalformedProviderResponse(OAuthFlowError):
    """GitHub answered the code exchange without an access token."""

    code = "malformed_response"

    def __init__(self, message: str = "No access token in provider response") -> None:
        super().__init__(message)


class UpstreamUnavailable(OAuthFlowError):
    """GitHub could not be reached (timeout, DNS, TLS) or answered with an error status."""

    code = "upstream_unavailable"

    def __init__(self, message: str = "GitHub is unavailable") -> None:
        super().__init__(message)


class IdentityFetchFailed(OAuthFlowError):
    """The authenticated profile could not be read."""

    code = "identity_fetch_failed"

    def __init__(self, message: str = "Failed to fetch user profile") -> None:
        super().__init__(message)
