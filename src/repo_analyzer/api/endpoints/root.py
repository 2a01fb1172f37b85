"""Root endpoint providing service information."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from repo_analyzer.api.dependencies import get_app_settings
from repo_analyzer.core.config import Settings
from repo_analyzer.schemas.health import RootResponse


router = APIRouter(tags=["Root"])


@router.get(
    "/",
    response_model=RootResponse,
    summary="Root endpoint",
    description="Basic service information and links.",
)
async def root(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RootResponse:
    return RootResponse(
        service=settings.app.name,
        version=settings.app.version,
        status="operational",
        docs="/docs" if settings.is_non_production else "disabled",
        health="/health",
    )
