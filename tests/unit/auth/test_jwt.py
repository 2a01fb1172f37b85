"""Unit tests for session token signing.

Tests cover:
- Token creation and claims
- Expiration
- Kind verification
- Signature checks
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time

from repo_analyzer.auth.jwt import (
    TokenExpiredError,
    TokenInvalidError,
    create_session_token,
    decode_session_token,
)


pytestmark = pytest.mark.unit

SECRET = "test-secret-key-minimum-32-characters-long"  # noqa: S105


class TestCreateSessionToken:
    """Tests for create_session_token function."""

    @freeze_time("2026-01-01 12:00:00")
    def test_standard_claims(self) -> None:
        """Should include subject, kind, iat and exp."""
        token = create_session_token(
            "octocat",
            kind="provider",
            secret_key=SECRET,
            expires_delta=timedelta(hours=23),
        )

        payload = decode_session_token(token, secret_key=SECRET)
        now = int(datetime(2026, 1, 1, 12, 0, tzinfo=UTC).timestamp())
        assert payload["sub"] == "octocat"
        assert payload["kind"] == "provider"
        assert payload["iat"] == now
        assert payload["exp"] == now + 23 * 3600

    def test_extra_claims(self) -> None:
        """Should merge extra claims into the payload."""
        token = create_session_token(
            "octocat",
            kind="provider",
            secret_key=SECRET,
            expires_delta=timedelta(minutes=5),
            extra_claims={"identity": {"id": 1, "login": "octocat"}},
        )

        payload = decode_session_token(token, secret_key=SECRET)
        assert payload["identity"] == {"id": 1, "login": "octocat"}


class TestDecodeSessionToken:
    """Tests for decode_session_token function."""

    def test_expired(self) -> None:
        """Should raise TokenExpiredError after expiry."""
        with freeze_time("2026-01-01 12:00:00"):
            token = create_session_token(
                "admin", kind="admin", secret_key=SECRET, expires_delta=timedelta(minutes=1)
            )

        with freeze_time("2026-01-01 12:02:00"), pytest.raises(TokenExpiredError):
            decode_session_token(token, secret_key=SECRET)

    def test_wrong_kind(self) -> None:
        """Should raise TokenInvalidError for another session kind."""
        token = create_session_token(
            "admin", kind="admin", secret_key=SECRET, expires_delta=timedelta(minutes=5)
        )

        with pytest.raises(TokenInvalidError, match="Expected provider"):
            decode_session_token(token, secret_key=SECRET, expected_kind="provider")

    def test_wrong_secret(self) -> None:
        """Should raise TokenInvalidError for a foreign signature."""
        token = create_session_token(
            "admin", kind="admin", secret_key=SECRET, expires_delta=timedelta(minutes=5)
        )

        with pytest.raises(TokenInvalidError):
            decode_session_token(token, secret_key="another-secret-key-minimum-32-chars")

    def test_garbage(self) -> None:
        with pytest.raises(TokenInvalidError):
            decode_session_token("not-a-token", secret_key=SECRET)
