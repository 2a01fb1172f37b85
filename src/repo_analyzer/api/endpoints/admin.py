"""Admin login and usage analytics."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from repo_analyzer.api.dependencies import (
    get_analytics,
    get_credential_verifier,
    get_materializer,
    require_admin,
)
from repo_analyzer.auth.analytics import UsageAnalytics
from repo_analyzer.auth.credentials import CredentialVerifier
from repo_analyzer.auth.models import Session, SessionKind
from repo_analyzer.auth.session import SessionMaterializer
from repo_analyzer.cache.rate_limit import rate_limit_auth
from repo_analyzer.core.exceptions import UnauthorizedException
from repo_analyzer.observability.logging import get_logger
from repo_analyzer.observability.metrics import record_login
from repo_analyzer.schemas.analytics import AnalyticsResponse
from repo_analyzer.schemas.auth import AdminLoginRequest, AdminLoginResponse, SessionResponse


router = APIRouter(prefix="/api/admin", tags=["Admin"])

logger = get_logger(__name__)


@router.post(
    "/login",
    response_model=AdminLoginResponse,
    summary="Admin login",
    responses={401: {"description": "Invalid credentials"}},
)
@rate_limit_auth()
async def admin_login(
    request: Request,
    response: Response,
    body: AdminLoginRequest,
    verifier: Annotated[CredentialVerifier, Depends(get_credential_verifier)],
    materializer: Annotated[SessionMaterializer, Depends(get_materializer)],
    analytics: Annotated[UsageAnalytics, Depends(get_analytics)],
) -> AdminLoginResponse:
    """Check the credentials and establish an admin session.

    Any GitHub session cookies are removed.
    """
    if not verifier.verify(body.username, body.password):
        record_login(SessionKind.ADMIN, "invalid_credentials")
        logger.warning("Admin login rejected", username=body.username)
        raise UnauthorizedException("Invalid username or password")

    session = materializer.materialize_admin(response, body.username)
    analytics.record_login(body.username, admin=True)
    record_login(SessionKind.ADMIN, "success")

    return AdminLoginResponse(session=SessionResponse.from_session(session))


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Usage analytics",
    responses={
        401: {"description": "No valid session"},
        403: {"description": "Session is not an admin session"},
    },
)
async def usage_analytics(
    _admin: Annotated[Session, Depends(require_admin)],
    analytics: Annotated[UsageAnalytics, Depends(get_analytics)],
) -> AnalyticsResponse:
    return AnalyticsResponse.from_snapshot(analytics.snapshot())
