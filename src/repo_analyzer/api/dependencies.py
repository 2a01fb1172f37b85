"""FastAPI dependencies for service and session access.

Services are initialized during application startup and stored in
``app.state``. A missing service means startup failed for it and is
reported as 503.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Request

from repo_analyzer.auth.analytics import UsageAnalytics
from repo_analyzer.auth.credentials import CredentialVerifier
from repo_analyzer.auth.flow import OAuthLoginFlow
from repo_analyzer.auth.models import Session, SessionKind
from repo_analyzer.auth.session import SessionMaterializer
from repo_analyzer.clients.github.repositories import RepositoryMetricsClient
from repo_analyzer.core.config import Settings
from repo_analyzer.core.exceptions import (
    ForbiddenException,
    ServiceUnavailableException,
    UnauthorizedException,
)
from repo_analyzer.observability.logging import bind_context


def _from_state(request: Request, name: str, label: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise ServiceUnavailableException(f"{label} not available")
    return service


async def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings  # type: ignore[no-any-return]


async def get_login_flow(request: Request) -> OAuthLoginFlow:
    return _from_state(request, "login_flow", "GitHub login")


async def get_materializer(request: Request) -> SessionMaterializer:
    return _from_state(request, "session_materializer", "Session handling")


async def get_credential_verifier(request: Request) -> CredentialVerifier:
    return _from_state(request, "credential_verifier", "Admin login")


async def get_analytics(request: Request) -> UsageAnalytics:
    return _from_state(request, "analytics", "Analytics")


async def get_repository_client(request: Request) -> RepositoryMetricsClient:
    return _from_state(request, "repository_client", "Repository metrics")


async def get_session(
    request: Request,
    materializer: Annotated[SessionMaterializer, Depends(get_materializer)],
) -> Session | None:
    """The request's session, or None for anonymous requests."""
    session = materializer.read(request)
    if session is not None:
        bind_context(login=session.identity.login, session_kind=str(session.kind))
    return session


async def require_session(
    session: Annotated[Session | None, Depends(get_session)],
) -> Session:
    """Reject requests without a valid session (401)."""
    if session is None:
        raise UnauthorizedException
    return session


async def require_admin(
    session: Annotated[Session, Depends(require_session)],
) -> Session:
    """Reject requests without an admin session (401 or 403)."""
    if session.kind != SessionKind.ADMIN:
        raise ForbiddenException("Admin session required")
    return session
