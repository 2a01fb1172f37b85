"""Health check and service information schemas."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from repo_analyzer.schemas.base import APIResponse


class HealthResponse(APIResponse):
    """Liveness response."""

    status: str = Field(..., description="Health status", examples=["healthy"])
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Current server timestamp",
    )
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")


class ReadinessResponse(HealthResponse):
    """Readiness check response with dependency status."""

    dependencies: dict[str, str] = Field(
        default_factory=dict,
        description="Status of external dependencies",
    )


class RootResponse(APIResponse):
    """Basic service information returned by ``GET /``."""

    service: str = Field(..., description="Service name", examples=["Repo Analyzer"])
    version: str = Field(..., description="Service version")
    status: str = Field(..., description="Service operational status", examples=["operational"])
    docs: str = Field(..., description="API documentation URL or 'disabled'")
    health: str = Field(..., description="Health check endpoint URL")
