"""
NoteBrief Backend: Request ID Middleware
==========================================

What:  Assigns a correlation ID to each request and echoes it in X-Request-ID.
Why:   Every log line of a request, and the `request_id` field of every error
       body, carry the same ID, so a user's report maps straight to the logs.
How:   Reuses the client's X-Request-ID when sent, otherwise a short UUID.
       The ID lives in a ContextVar (coroutine-local) and in request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def current_request_id(request: Request) -> str:
    """Request ID for error bodies; falls back to request.state outside the ContextVar's scope."""
    return request_id_var.get("") or getattr(request.state, "request_id", "")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reads or generates the request ID and attaches it to the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
