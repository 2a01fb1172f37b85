"""Browser-navigated GitHub login endpoints.

``GET /auth/{provider}`` starts a login and ``GET /auth/{provider}/callback``
finishes it. Both answer with redirects: the callback never returns JSON so
the browser always lands on a dashboard page, with the failure code and
message in the query string when the login did not succeed.
"""

from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from repo_analyzer.api.dependencies import get_app_settings, get_login_flow
from repo_analyzer.auth.exceptions import OAuthFlowError
from repo_analyzer.auth.flow import OAuthLoginFlow
from repo_analyzer.cache.rate_limit import rate_limit_auth
from repo_analyzer.core.config import Settings
from repo_analyzer.core.exceptions import NotFoundException
from repo_analyzer.observability.logging import get_logger


router = APIRouter(prefix="/auth", tags=["Auth"])

logger = get_logger(__name__)

SUPPORTED_PROVIDERS = frozenset({"github"})


def _ensure_supported(provider: str) -> None:
    if provider not in SUPPORTED_PROVIDERS:
        raise NotFoundException("Login provider", provider)


def error_redirect_url(settings: Settings, error: OAuthFlowError) -> str:
    """Frontend error page carrying the failure code and a safe message."""
    query = urlencode({"error": error.code, "message": error.public_message})
    return f"{settings.frontend_error_url}?{query}"


@router.get(
    "/{provider}",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    summary="Start a login",
    description="Redirect the browser to the provider's authorize page.",
)
@rate_limit_auth()
async def start_login(
    request: Request,
    provider: str,
    flow: Annotated[OAuthLoginFlow, Depends(get_login_flow)],
) -> Response:
    """Issue a state token and redirect to GitHub."""
    _ensure_supported(provider)

    return RedirectResponse(await flow.start(), status_code=status.HTTP_302_FOUND)


@router.get(
    "/{provider}/callback",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    summary="Finish a login",
    description=(
        "Validate the callback, exchange the code, load the identity and set "
        "the session cookies, then redirect to the dashboard."
    ),
)
async def login_callback(
    request: Request,
    provider: str,
    flow: Annotated[OAuthLoginFlow, Depends(get_login_flow)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Response:
    _ensure_supported(provider)

    response = RedirectResponse(
        settings.frontend_success_url,
        status_code=status.HTTP_302_FOUND,
    )
    try:
        await flow.complete(request.query_params, response)
    except OAuthFlowError as e:
        logger.info("Login failed", provider=provider, error_code=e.code)
        return RedirectResponse(
            error_redirect_url(settings, e),
            status_code=status.HTTP_302_FOUND,
        )

    return response
