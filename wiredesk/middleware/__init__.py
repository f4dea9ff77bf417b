"""
Middleware module initialization.
"""
from wiredesk.middleware.errors import UnhandledErrorMiddleware, unhandled_error_response
from wiredesk.middleware.logging import (
    CorrelationIdMiddleware,
    RequestLoggingMiddleware,
    get_correlation_id,
    redact_sensitive_data,
    redact_sentry_event,
    log_performance,
    timed_operation,
    configure_logging,
    add_correlation_id_processor,
    redact_sensitive_processor,
)
from wiredesk.middleware.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    submit_rate_limit,
)
from wiredesk.middleware.security import SecurityHeadersMiddleware, get_cors_origins

__all__ = [
    "UnhandledErrorMiddleware",
    "unhandled_error_response",
    "CorrelationIdMiddleware",
    "RequestLoggingMiddleware",
    "get_correlation_id",
    "redact_sensitive_data",
    "redact_sentry_event",
    "log_performance",
    "timed_operation",
    "configure_logging",
    "add_correlation_id_processor",
    "redact_sensitive_processor",
    "limiter",
    "rate_limit_exceeded_handler",
    "submit_rate_limit",
    "SecurityHeadersMiddleware",
    "get_cors_origins",
]
