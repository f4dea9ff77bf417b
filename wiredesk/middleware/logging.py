"""
Request tracing and structured logging for WireDesk.

Every request carries a correlation id (``X-Correlation-ID``) that is
attached to each log entry written while it is handled. Bank details,
submitter contact data and credentials are redacted before an entry is
rendered or an event is sent to Sentry; ``SENSITIVE_FIELDS`` is the only
list of what counts as sensitive.
"""
import functools
import inspect
import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Iterator, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from wiredesk.config import Settings

CORRELATION_HEADER = "X-Correlation-ID"
REDACTED = "[REDACTED]"

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger(__name__)

# Matched as substrings of lower-cased keys: "ibanBeneficiario" and
# "submitterEmail" are both caught
SENSITIVE_FIELDS = {
    "authorization", "api_key", "secret", "token",
    "iban", "aba", "account", "email",
}

_MAX_REDACT_DEPTH = 5


def get_correlation_id() -> str:
    """Correlation id of the request being handled, or "" outside a request."""
    return correlation_id.get()


# =============================================================================
# Redaction
# =============================================================================

def is_sensitive_key(key: Any) -> bool:
    key_lower = str(key).lower()
    return any(field in key_lower for field in SENSITIVE_FIELDS)


def redact_sensitive_data(data: Any, depth: int = 0) -> Any:
    """
    Return a copy of ``data`` with sensitive values replaced by "[REDACTED]".

    Dicts are redacted by key. Lists and tuples are walked so records nested
    inside them are covered too. Any other value is returned unchanged, as
    is anything nested deeper than five levels.
    """
    if depth > _MAX_REDACT_DEPTH:
        return data
    if isinstance(data, dict):
        return {
            key: REDACTED if is_sensitive_key(key) else redact_sensitive_data(value, depth + 1)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_sensitive_data(item, depth + 1) for item in data]
    if isinstance(data, tuple):
        return tuple(redact_sensitive_data(item, depth + 1) for item in data)
    return data


def redact_sentry_event(event: dict, hint: Optional[dict] = None) -> dict:
    """Sentry ``before_send`` hook: redact request body, headers and extras."""
    request = event.get("request")
    if isinstance(request, dict):
        for part in ("data", "headers"):
            if part in request:
                request[part] = redact_sensitive_data(request[part])
    if "extra" in event:
        event["extra"] = redact_sensitive_data(event["extra"])
    return event


# =============================================================================
# Middleware
# =============================================================================

class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Takes the caller's correlation id or assigns one, and echoes it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        token = correlation_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id.reset(token)

        response.headers[CORRELATION_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes one log entry per request with its status and duration."""

    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

    # A render plus one email round trip
    SLOW_REQUEST_MS = 5000

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        }

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                **request_info,
                error_type=type(exc).__name__,
                duration_ms=_elapsed_ms(start),
            )
            raise

        duration_ms = _elapsed_ms(start)
        log = logger.warning if duration_ms > self.SLOW_REQUEST_MS else logger.info
        log(
            "request_completed",
            **request_info,
            status_code=response.status_code,
            duration_ms=duration_ms,
            slow=duration_ms > self.SLOW_REQUEST_MS,
        )
        return response


# =============================================================================
# Timing
# =============================================================================

def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


@contextmanager
def timed_operation(operation: str) -> Iterator[None]:
    """Log the duration of the enclosed block, or its failure and re-raise."""
    start = time.perf_counter()
    try:
        yield
    except Exception as exc:
        logger.error(
            "operation_failed",
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
            duration_ms=_elapsed_ms(start),
        )
        raise
    logger.info("operation_completed", operation=operation, duration_ms=_elapsed_ms(start))


def log_performance(operation_name: str):
    """
    Decorator timing a sync or async function with ``timed_operation``.

    Usage:
        @log_performance("pdf_render")
        def render_wire_transfer_pdf(request):
            ...
    """
    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> Any:
                with timed_operation(operation_name):
                    return await func(*args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            with timed_operation(operation_name):
                return func(*args, **kwargs)

        return sync_wrapper

    return decorator


# =============================================================================
# structlog setup
# =============================================================================

def add_correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict
) -> dict:
    """Structlog processor adding the current correlation id, when there is one."""
    request_id = get_correlation_id()
    if request_id:
        event_dict.setdefault("correlation_id", request_id)
    return event_dict


def redact_sensitive_processor(
    logger: Any, method_name: str, event_dict: dict
) -> dict:
    """Structlog processor applying ``redact_sensitive_data`` to every entry."""
    return redact_sensitive_data(event_dict)


def configure_logging(settings: Settings) -> None:
    """Send structlog through stdlib logging as one JSON object per line."""
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            add_correlation_id_processor,
            redact_sensitive_processor,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
