"""Security headers middleware.

Learn: Adds standard security headers to every response, plus
`Cache-Control: no-store` on anything that sets or clears a token cookie
and on every 401/403, so shared caches never keep credentials or
rejection pages around.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        for name, value in _HEADERS.items():
            response.headers[name] = value

        if "set-cookie" in response.headers or response.status_code in (401, 403):
            response.headers["Cache-Control"] = "no-store"

        # Only add HSTS on HTTPS connections
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
