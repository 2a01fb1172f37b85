"""Prometheus metrics instrumentation.

This module provides:
- FastAPI automatic request metrics
- Login outcome counters
- Metrics endpoint configuration
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator, metrics

from repo_analyzer.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI

    from repo_analyzer.core.config import Settings

logger = get_logger(__name__)

METRIC_NAMESPACE = "repo_analyzer"

LOGIN_ATTEMPTS = Counter(
    "login_attempts_total",
    "Completed login attempts by session kind and outcome code",
    labelnames=("kind", "outcome"),
    namespace=METRIC_NAMESPACE,
    subsystem="auth",
)


def record_login(kind: str, outcome: str) -> None:
    """Count a finished login attempt.

    Args:
        kind: ``provider`` or ``admin``.
        outcome: ``success`` or the error code of the failure.
    """
    LOGIN_ATTEMPTS.labels(kind=kind, outcome=outcome).inc()


def setup_metrics(app: FastAPI, settings: Settings) -> Instrumentator | None:
    """Configure Prometheus HTTP metrics and expose ``/metrics``.

    Returns:
        The configured Instrumentator, or None when metrics are disabled.
    """
    if not settings.observability.metrics.enabled:
        logger.info("Metrics collection disabled")
        return None

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/health", "/ready", "/metrics", "/openapi.json", "/docs"],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )

    instrumentator.add(
        metrics.default(
            metric_namespace=METRIC_NAMESPACE,
            metric_subsystem="http",
        )
    )

    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint="/metrics", include_in_schema=False)

    logger.info("Prometheus metrics configured", endpoint="/metrics")

    return instrumentator


__all__ = ["record_login", "setup_metrics"]
