"""HTTP middleware: request IDs, access logging and security headers."""

from repo_analyzer.core.middleware.logging import LoggingMiddleware
from repo_analyzer.core.middleware.request_id import RequestIDMiddleware
from repo_analyzer.core.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "LoggingMiddleware",
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
]
