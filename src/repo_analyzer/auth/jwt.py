"""Signing and verification of session cookie values.

Session cookies hold an HS256 JWT. The signature makes the cookie tamper
evident; the cookie is HTTP-only so page scripts never see the contents.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from repo_analyzer.observability.logging import get_logger


logger = get_logger(__name__)


class TokenError(Exception):
    """Base exception for token-related errors."""


class TokenExpiredError(TokenError):
    """Raised when a token has expired."""


class TokenInvalidError(TokenError):
    """Raised when a token is invalid."""


def create_session_token(
    subject: str,
    *,
    kind: str,
    secret_key: str,
    expires_delta: timedelta,
    algorithm: str = "HS256",
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Create a signed session token.

    Args:
        subject: The subject of the token (GitHub login or admin username).
        kind: Session kind claim, ``provider`` or ``admin``.
        secret_key: HMAC signing key.
        expires_delta: Lifetime of the token.
        algorithm: JWS algorithm.
        extra_claims: Additional claims to include in the token.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(UTC)

    payload: dict[str, Any] = {
        "sub": subject,
        "kind": kind,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    if extra_claims:
        payload.update(extra_claims)

    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_session_token(
    token: str,
    *,
    secret_key: str,
    algorithm: str = "HS256",
    expected_kind: str | None = None,
) -> dict[str, Any]:
    """Decode and validate a session token.

    Raises:
        TokenExpiredError: If the token has expired.
        TokenInvalidError: If the signature, format or kind is wrong.
    """
    try:
        payload: dict[str, Any] = jwt.decode(token, secret_key, algorithms=[algorithm])
    except ExpiredSignatureError as e:
        logger.debug("Session token expired")
        msg = "Token has expired"
        raise TokenExpiredError(msg) from e
    except JWTError as e:
        logger.warning("Invalid session token", error=str(e))
        msg = "Invalid token"
        raise TokenInvalidError(msg) from e

    if expected_kind and payload.get("kind") != expected_kind:
        msg = f"Invalid session kind. Expected {expected_kind}, got {payload.get('kind')}"
        raise TokenInvalidError(msg)

    return payload
