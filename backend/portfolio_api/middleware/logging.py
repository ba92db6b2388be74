"""
Portfolio API — Request Logging Middleware
===========================================

What:  One access-log line per request: method, path, status, duration,
       request ID and client address.
Why:   Replaces uvicorn's access log (silenced in main.setup_logging) with a
       line that carries the request ID.

Level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO
    An exception escaping the route is logged as 500 before it propagates.

Request bodies are never logged; feedback and hire requests contain
personal data.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from portfolio_api.middleware.request_id import current_request_id

logger = logging.getLogger("portfolio_api.access")

# Probed frequently by orchestrators; logging them drowns real traffic
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception:
            # ServerErrorMiddleware answers 500 outside this middleware; log the line here
            self._log(request, path, 500, start_time, client_ip)
            raise

        self._log(request, path, response.status_code, start_time, client_ip)
        return response

    @staticmethod
    def _log(request: Request, path: str, status: int, start_time: float, client_ip: str) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = current_request_id(request)
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
