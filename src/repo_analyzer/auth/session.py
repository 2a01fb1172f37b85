"""Browser session cookies.

A provider (GitHub) session is two cookies written on the same response:

- ``session``: HTTP-only signed JWT with the session kind, identity and the
  GitHub access token
- ``session_user``: readable by the dashboard, carries only login, display
  name and avatar as base64url JSON

An admin session is the single HTTP-only ``admin_session`` cookie. Writing
one kind always deletes the other kind's cookies, and every cookie is set
with the same resolved ``CookiePolicy``.
"""

from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import orjson

from repo_analyzer.auth.jwt import TokenError, create_session_token, decode_session_token
from repo_analyzer.auth.models import Identity, Session, SessionKind
from repo_analyzer.observability.logging import get_logger


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

    from repo_analyzer.auth.models import AccessToken
    from repo_analyzer.core.config import CookiePolicy
    from repo_analyzer.core.config.settings import CookieSettings

logger = get_logger(__name__)


def encode_identity_cookie(identity: Identity) -> str:
    """Non-sensitive identity summary for the dashboard."""
    data = {
        "login": identity.login,
        "displayName": identity.display_name,
        "avatarUrl": identity.avatar_url,
    }
    return base64.urlsafe_b64encode(orjson.dumps(data)).decode().rstrip("=")


def decode_identity_cookie(value: str) -> dict[str, Any]:
    padded = value + "=" * (-len(value) % 4)
    return orjson.loads(base64.urlsafe_b64decode(padded))


class SessionMaterializer:
    """The only writer of session cookies, and the reader used by route guards."""

    def __init__(
        self,
        *,
        secret_key: str,
        policy: CookiePolicy,
        cookies: CookieSettings,
        algorithm: str = "HS256",
    ) -> None:
        self._secret_key = secret_key
        self._policy = policy
        self._cookies = cookies
        self._algorithm = algorithm

    @property
    def policy(self) -> CookiePolicy:
        return self._policy

    # =========================================================================
    # Writing
    # =========================================================================

    def materialize(
        self,
        response: Response,
        identity: Identity,
        access_token: AccessToken,
    ) -> Session:
        """Establish a provider session on ``response``.

        Any admin session cookie is removed in the same response.
        """
        session = Session(
            kind=SessionKind.PROVIDER,
            identity=identity,
            created_at=datetime.now(UTC),
            access_token=access_token.value,
        )
        token = create_session_token(
            identity.login,
            kind=SessionKind.PROVIDER,
            secret_key=self._secret_key,
            algorithm=self._algorithm,
            expires_delta=timedelta(seconds=self._policy.max_age),
            extra_claims={
                "identity": identity.model_dump(mode="json"),
                "token": access_token.value,
            },
        )

        self._set(response, self._cookies.session_name, token, http_only=True)
        self._set(
            response,
            self._cookies.identity_name,
            encode_identity_cookie(identity),
            http_only=False,
        )
        self._delete(response, self._cookies.admin_name)

        logger.info("Provider session established", login=identity.login)
        return session

    def materialize_admin(self, response: Response, username: str) -> Session:
        """Establish an admin session on ``response``.

        Any provider session cookies are removed in the same response.
        """
        identity = Identity(id=0, login=username, display_name=username)
        session = Session(
            kind=SessionKind.ADMIN,
            identity=identity,
            created_at=datetime.now(UTC),
        )
        token = create_session_token(
            username,
            kind=SessionKind.ADMIN,
            secret_key=self._secret_key,
            algorithm=self._algorithm,
            expires_delta=timedelta(seconds=self._policy.max_age),
        )

        self._set(response, self._cookies.admin_name, token, http_only=True)
        self._delete(response, self._cookies.session_name)
        self._delete(response, self._cookies.identity_name)

        logger.info("Admin session established", username=username)
        return session

    def clear(self, response: Response, kind: SessionKind) -> None:
        """Delete the cookies of one session kind. Safe to repeat."""
        if kind == SessionKind.PROVIDER:
            self._delete(response, self._cookies.session_name)
            self._delete(response, self._cookies.identity_name)
        else:
            self._delete(response, self._cookies.admin_name)

    # =========================================================================
    # Reading
    # =========================================================================

    def read(self, request: Request) -> Session | None:
        """Return the request's session, or None.

        An invalid or expired cookie counts as no session. A valid provider
        session wins over an admin session.
        """
        provider = self._read_provider(request.cookies.get(self._cookies.session_name))
        if provider is not None:
            return provider
        return self._read_admin(request.cookies.get(self._cookies.admin_name))

    def _read_provider(self, raw: str | None) -> Session | None:
        if not raw:
            return None
        try:
            claims = decode_session_token(
                raw,
                secret_key=self._secret_key,
                algorithm=self._algorithm,
                expected_kind=SessionKind.PROVIDER,
            )
            return Session(
                kind=SessionKind.PROVIDER,
                identity=Identity.model_validate(claims["identity"]),
                created_at=datetime.fromtimestamp(claims["iat"], UTC),
                access_token=claims.get("token"),
            )
        except (TokenError, KeyError, ValueError):
            return None

    def _read_admin(self, raw: str | None) -> Session | None:
        if not raw:
            return None
        try:
            claims = decode_session_token(
                raw,
                secret_key=self._secret_key,
                algorithm=self._algorithm,
                expected_kind=SessionKind.ADMIN,
            )
            username = str(claims["sub"])
            return Session(
                kind=SessionKind.ADMIN,
                identity=Identity(id=0, login=username, display_name=username),
                created_at=datetime.fromtimestamp(claims["iat"], UTC),
            )
        except (TokenError, KeyError, ValueError):
            return None

    # =========================================================================
    # Cookie helpers
    # =========================================================================

    def _set(
        self,
        response: Response,
        key: str,
        value: str,
        *,
        http_only: bool,
        max_age: int | None = None,
    ) -> None:
        response.set_cookie(
            key,
            value,
            max_age=max_age if max_age is not None else self._policy.max_age,
            path="/",
            domain=self._policy.domain,
            secure=self._policy.secure,
            httponly=http_only,
            samesite=self._policy.same_site.value,
        )

    def _delete(self, response: Response, key: str) -> None:
        response.delete_cookie(
            key,
            path="/",
            domain=self._policy.domain,
            secure=self._policy.secure,
            samesite=self._policy.same_site.value,
        )
