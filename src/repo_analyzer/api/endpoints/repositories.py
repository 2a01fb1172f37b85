"""Repository metrics for the analysis page."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from repo_analyzer.api.dependencies import get_analytics, get_repository_client, get_session
from repo_analyzer.auth.analytics import UsageAnalytics
from repo_analyzer.auth.exceptions import UpstreamUnavailable
from repo_analyzer.auth.models import Session, SessionKind
from repo_analyzer.clients.github.repositories import (
    InvalidRepositoryURL,
    RepositoryMetricsClient,
    RepositoryNotFound,
    parse_repository_url,
)
from repo_analyzer.core.exceptions import (
    BadRequestException,
    NotFoundException,
    ServiceUnavailableException,
)
from repo_analyzer.schemas.repository import RepositoryMetrics


router = APIRouter(prefix="/api/repos", tags=["Repositories"])


@router.get(
    "/metrics",
    response_model=RepositoryMetrics,
    summary="Repository metrics",
    description=(
        "Languages, recent commits, contributors and pull request counts for "
        "one repository. Works anonymously; a GitHub session's token is used "
        "when present for the higher API rate limit."
    ),
)
async def repository_metrics(
    url: Annotated[str, Query(min_length=3, max_length=300, description="Repository URL or owner/repo")],
    client: Annotated[RepositoryMetricsClient, Depends(get_repository_client)],
    analytics: Annotated[UsageAnalytics, Depends(get_analytics)],
    session: Annotated[Session | None, Depends(get_session)],
) -> RepositoryMetrics:
    try:
        owner, repo = parse_repository_url(url)
    except InvalidRepositoryURL as e:
        raise BadRequestException(str(e)) from e

    access_token = None
    if session is not None and session.kind == SessionKind.PROVIDER:
        access_token = session.access_token

    try:
        metrics = await client.fetch_metrics(owner, repo, access_token=access_token)
    except RepositoryNotFound as e:
        raise NotFoundException("Repository", f"{owner}/{repo}") from e
    except UpstreamUnavailable as e:
        raise ServiceUnavailableException(e.message) from e

    if session is not None:
        analytics.record_analysis(session.identity.login, owner, repo)

    return metrics
