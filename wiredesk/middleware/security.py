"""
Security headers middleware for API hardening.

Adds essential security headers to all responses.
"""
import os
from typing import Callable, List

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from wiredesk.config import get_settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds security headers to all responses.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy
    - Content-Security-Policy
    - Strict-Transport-Security (when enabled)
    """

    # Whether to enable HSTS (should be True in production with HTTPS)
    ENABLE_HSTS = os.getenv("ENABLE_HSTS", "false").lower() == "true"

    # HSTS max-age in seconds (1 year)
    HSTS_MAX_AGE = 31536000

    # JSON API only: nothing to load, nothing to embed
    CSP_POLICY = "; ".join([
        "default-src 'none'",
        "frame-ancestors 'none'",
        "base-uri 'none'",
        "form-action 'none'",
    ])

    # Swagger UI pulls its assets from a CDN
    DOCS_PATHS = {"/docs", "/redoc"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.path not in self.DOCS_PATHS:
            response.headers["Content-Security-Policy"] = self.CSP_POLICY

        if self.ENABLE_HSTS:
            response.headers["Strict-Transport-Security"] = (
                f"max-age={self.HSTS_MAX_AGE}; includeSubDomains"
            )

        if "Server" in response.headers:
            del response.headers["Server"]

        return response


def get_cors_origins() -> List[str]:
    """
    Get allowed CORS origins.

    The submission form is a static page that may be hosted anywhere, so
    every origin is allowed unless CORS_ORIGINS narrows it down.
    """
    return list(get_settings().cors_origins)
