"""Value types of the login flow.

Transient flow values (state, callback, token) are frozen dataclasses like
the other client result types. ``Identity`` and ``Session`` are pydantic
models because they are written into and read back from signed cookies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CsrfState:
    """Anti-CSRF nonce bound to one login attempt."""

    token: str
    created_at: datetime
    consumed: bool = False

    def is_expired(self, ttl_seconds: int, now: datetime | None = None) -> bool:
        """Whether the nonce is older than the expiry window."""
        now = now or utcnow()
        return now - self.created_at > timedelta(seconds=ttl_seconds)

    def mark_consumed(self) -> CsrfState:
        return replace(self, consumed=True)


@dataclass(frozen=True, slots=True)
class AuthorizationRequest:
    """Parameters of the GitHub authorize redirect. Never persisted."""

    client_id: str
    redirect_uri: str
    scope: str
    state: str


class CallbackOutcome(StrEnum):
    """Terminal and non-terminal states of callback validation."""

    CODE_RECEIVED = "code_received"
    REJECTED = "rejected"
    CSRF_FAILURE = "csrf_failure"
    MISSING_CODE = "missing_code"


@dataclass(frozen=True, slots=True)
class CallbackResult:
    """Query parameters GitHub sent back to the callback."""

    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None


@dataclass(frozen=True, slots=True)
class AccessToken:
    """GitHub access token. Held server side only."""

    value: str
    token_type: str = "bearer"
    scope: str = ""

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks
        return f"AccessToken(token_type={self.token_type!r}, scope={self.scope!r})"


class Identity(BaseModel):
    """Authenticated GitHub user."""

    model_config = ConfigDict(frozen=True)

    id: int
    login: str
    display_name: str
    avatar_url: str | None = None
    primary_email: str | None = None


class SessionKind(StrEnum):
    """The two mutually exclusive session kinds."""

    ADMIN = "admin"
    PROVIDER = "provider"


class Session(BaseModel):
    """A logged-in browser session.

    Tagged by ``kind``. Provider sessions carry the GitHub access token,
    which is excluded from every serialization.
    """

    model_config = ConfigDict(frozen=True)

    kind: SessionKind
    identity: Identity
    created_at: datetime = Field(default_factory=utcnow)
    access_token: str | None = Field(default=None, exclude=True, repr=False)

    @property
    def is_admin(self) -> bool:
        return self.kind == SessionKind.ADMIN

