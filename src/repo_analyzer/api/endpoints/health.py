"""Health check endpoints.

Liveness and readiness probes for the hosting platform and load balancers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from repo_analyzer.api.dependencies import get_app_settings
from repo_analyzer.cache.redis import check_redis_health
from repo_analyzer.core.config import Settings
from repo_analyzer.schemas.health import HealthResponse, ReadinessResponse


router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Basic health check to verify the service is running.",
)
async def health_check(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """Check if the service is alive. Dependencies are not checked."""
    return HealthResponse(
        status="healthy",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check verifying dependencies are available.",
)
async def readiness_check(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ReadinessResponse:
    """Check if the service is ready to handle logins.

    Redis is reported but only degrades readiness when the state store
    depends on it.
    """
    dependencies: dict[str, str] = {}

    if settings.redis.enabled:
        dependencies.update(await check_redis_health())
    else:
        dependencies["redis_cache"] = "not_configured"

    store = getattr(request.app.state, "state_store", None)
    dependencies["state_store"] = type(store).__name__ if store else "not_initialized"

    degraded = store is None or (
        dependencies["state_store"] == "RedisAuthSessionStore"
        and dependencies.get("redis_cache") != "healthy"
    )

    return ReadinessResponse(
        status="degraded" if degraded else "ready",
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies=dependencies,
    )
