"""Request logging middleware for the keys server.

Binds a ULID ``request_id`` plus the method and path into the structlog
context for the lifetime of each request, and logs one ``Request served``
event with the status and duration once the response is ready.
Query strings are not logged.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from keyserver.utils.logger import bind_request_context, clear_request_context, get_logger
from keyserver.utils.ulid import generate_request_id

logger = get_logger(__name__)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Access log with per-request correlation IDs.

    Registration (in create_app() in keyserver/main.py):
        application.add_middleware(RequestLogMiddleware)
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        bind_request_context(
            generate_request_id(), method=request.method, path=request.url.path
        )
        start = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "Request served",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 3),
            )
            return response
        finally:
            clear_request_context()
