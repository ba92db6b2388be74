"""
Portfolio API — Request ID Middleware
======================================

What:  Assigns an ID to each request and returns it in the X-Request-ID header.
Why:   Error bodies and log lines carry the same ID, so a failing call seen by
       a client can be matched to the server log entry.
How:   Reuses a client-supplied X-Request-ID when it is a short token, otherwise
       generates a short UUID; stores it in a ContextVar and on request.state.

Responses built by ServerErrorMiddleware (unhandled exceptions) never pass
back through this middleware, so the 500 handler in main.py stamps the
header itself using current_request_id().
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in log lines; anything else is replaced
_CLIENT_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def current_request_id(request: Request) -> str:
    """ID of the request being handled, from the ContextVar or request.state."""
    return request_id_var.get("") or getattr(request.state, "request_id", "")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get(REQUEST_ID_HEADER, "")
        rid = supplied if _CLIENT_ID.match(supplied) else uuid.uuid4().hex[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
