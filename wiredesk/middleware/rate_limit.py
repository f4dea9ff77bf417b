"""
Rate limiting for the submission endpoint using slowapi.

Each accepted submission sends a real email, so clients are throttled.
"""
import os

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.responses import JSONResponse
import structlog

from wiredesk.config import get_settings

logger = structlog.get_logger(__name__)


def get_client_identifier(request: Request) -> str:
    """Client IP, honouring the first X-Forwarded-For hop behind a proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


# In-memory storage unless a Redis URL is configured
REDIS_URL = os.getenv("REDIS_URL")
if REDIS_URL:
    limiter = Limiter(key_func=get_client_identifier, storage_uri=REDIS_URL)
else:
    limiter = Limiter(key_func=get_client_identifier)


def submit_rate_limit() -> str:
    """Configured limit for wire transfer submissions, e.g. "60/minute"."""
    return get_settings().submit_rate_limit


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Return the standard JSON error envelope with retry information."""
    logger.warning(
        "rate_limit_exceeded",
        client=get_client_identifier(request),
        path=request.url.path,
        limit=str(exc.detail),
    )

    retry_after = 60

    return JSONResponse(
        status_code=429,
        content={
            "error": True,
            "error_code": "WD-429",
            "message": "Too many requests. Please slow down.",
            "details": {
                "limit": str(exc.detail),
                "retry_after_seconds": retry_after,
            },
        },
        headers={"Retry-After": str(retry_after)},
    )
