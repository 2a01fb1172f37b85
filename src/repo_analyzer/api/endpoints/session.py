"""Session endpoints used by the dashboard's route guards."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from repo_analyzer.api.dependencies import get_materializer, get_session, require_session
from repo_analyzer.auth.models import Session, SessionKind
from repo_analyzer.auth.session import SessionMaterializer
from repo_analyzer.schemas.auth import SessionResponse, SuccessResponse


router = APIRouter(prefix="/api", tags=["Session"])


@router.get(
    "/user",
    response_model=SessionResponse,
    summary="Current session",
    responses={401: {"description": "No valid session"}},
)
async def current_user(
    session: Annotated[Session, Depends(require_session)],
) -> SessionResponse:
    """Return the identity behind the session cookie."""
    return SessionResponse.from_session(session)


@router.post(
    "/logout",
    response_model=SuccessResponse,
    summary="Log out",
)
async def logout(
    response: Response,
    session: Annotated[Session | None, Depends(get_session)],
    materializer: Annotated[SessionMaterializer, Depends(get_materializer)],
) -> SuccessResponse:
    """Clear the current session kind.

    Without a valid session every session cookie is cleared, which also
    removes stale or tampered cookies.
    """
    if session is None:
        materializer.clear(response, SessionKind.PROVIDER)
        materializer.clear(response, SessionKind.ADMIN)
    else:
        materializer.clear(response, session.kind)
    return SuccessResponse()
