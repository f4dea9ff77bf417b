"""
Last-resort handling for unexpected exceptions.

Mounted inside the CORS middleware, so WD-999 responses carry the same
CORS headers as every other response and a cross-origin form can read them.
WireDeskError subclasses never get here; the app's exception handler turns
them into their own envelopes.
"""
import traceback
from typing import Callable

import sentry_sdk
import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from wiredesk.config import get_settings

logger = structlog.get_logger(__name__)


def unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Report the exception and answer with the WD-999 envelope."""
    sentry_sdk.capture_exception(exc)

    logger.error(
        "unhandled_error",
        error_type=type(exc).__name__,
        message=str(exc),
        path=request.url.path,
        traceback=traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "error_code": "WD-999",
            "message": str(exc) or "An unexpected error occurred. Please try again.",
            "details": {"error_type": type(exc).__name__} if get_settings().debug else {},
        },
    )


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turns any exception escaping the app into a WD-999 JSON response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return unhandled_error_response(request, exc)
