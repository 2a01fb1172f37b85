"""Request ID middleware.

Every request gets an ID, taken from ``X-Request-ID`` when the caller sent a
usable one. The ID is stored on ``request.state``, echoed in the response and
bound to the logging context so all log lines of a login attempt correlate.
"""

from __future__ import annotations

import re
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from repo_analyzer.observability.logging import bind_context, clear_context

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

# Caller supplied IDs end up in logs and headers
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or generate a request ID for every request."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add request ID."""
        clear_context()

        incoming = request.headers.get(self.header_name)
        if incoming and _VALID_REQUEST_ID.match(incoming):
            request_id = incoming
        else:
            request_id = str(uuid.uuid4())

        request.state.request_id = request_id
        bind_context(request_id=request_id)

        response = await call_next(request)
        response.headers[self.header_name] = request_id

        return response
