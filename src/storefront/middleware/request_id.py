"""Request ID and access-log middleware.

Learn: Every request gets an id, either from the incoming X-Request-ID
header or generated here. It is bound to structlog's contextvars, so the
auth guard's events (auth.token_invalid, auth.role_denied, ...) carry
the same request_id as the access log line written after the response.
Headers and cookies are never logged: they carry tokens.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its outcome."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

        log = logger.warning if response.status_code in (401, 403) else logger.info
        log("http.request", status=response.status_code, elapsed_ms=elapsed_ms)

        response.headers["X-Request-ID"] = request_id
        return response
