"""Session and admin login schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from repo_analyzer.auth.models import Session, SessionKind
from repo_analyzer.schemas.base import APIRequest, APIResponse


class IdentityResponse(APIResponse):
    """Public part of the logged-in identity."""

    id: int
    login: str
    display_name: str
    avatar_url: str | None = None
    primary_email: str | None = None


class SessionResponse(APIResponse):
    """``GET /api/user``. Never includes the access token."""

    kind: SessionKind
    is_admin: bool
    identity: IdentityResponse
    created_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> SessionResponse:
        identity = session.identity
        return cls(
            kind=session.kind,
            is_admin=session.is_admin,
            identity=IdentityResponse(
                id=identity.id,
                login=identity.login,
                display_name=identity.display_name,
                avatar_url=identity.avatar_url,
                primary_email=identity.primary_email,
            ),
            created_at=session.created_at,
        )


class AdminLoginRequest(APIRequest):
    """``POST /api/admin/login`` body."""

    username: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=1, max_length=256)


class SuccessResponse(APIResponse):
    """``{"success": true}`` acknowledgement."""

    success: bool = True


class AdminLoginResponse(SuccessResponse):
    session: SessionResponse
