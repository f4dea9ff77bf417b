"""
FastAPI application entry point.

Configures the application with routes, middleware, and settings.
"""
import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from slowapi.errors import RateLimitExceeded

from wiredesk import __version__
from wiredesk.api.routes import wire_transfer
from wiredesk.config import get_settings
from wiredesk.exceptions import WireDeskError
from wiredesk.middleware.errors import UnhandledErrorMiddleware
from wiredesk.middleware.logging import (
    CorrelationIdMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
    redact_sentry_event,
)
from wiredesk.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from wiredesk.middleware.security import SecurityHeadersMiddleware, get_cors_origins

settings = get_settings()

# Initialize Sentry for error tracking (must be done early)
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=__version__,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(level=None, event_level="ERROR"),
        ],
        # Don't send PII by default
        send_default_pii=False,
        before_send=redact_sentry_event,
    )

configure_logging(settings)

logger = structlog.get_logger(__name__)

app = FastAPI(
    title="WireDesk API",
    description="""
## Wire Transfer Request Letters

WireDesk turns a wire transfer request into a signed-ready PDF letter for
the bank and emails it, with a summary, to the treasury mailbox.

### Flow

1. The submission is checked for its required fields
2. The letter is rendered to PDF (A4, paginated table of transfer details)
3. The PDF is emailed as `Wire_Transfer_<ref>.pdf`

Nothing is stored. A failure at any step fails the whole submission.
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Wire Transfers", "description": "Wire transfer letter submission"},
        {"name": "Health", "description": "Health checks"},
    ],
)

# Middleware added first runs innermost: unexpected errors are turned into
# responses before CORS headers are applied
app.add_middleware(UnhandledErrorMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    expose_headers=["X-Correlation-ID"],
)

app.add_middleware(SecurityHeadersMiddleware)

# Order matters: correlation ID first
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.include_router(wire_transfer.router, prefix="/api", tags=["Wire Transfers"])


@app.exception_handler(WireDeskError)
async def wiredesk_exception_handler(request: Request, exc: WireDeskError):
    """Handle all WireDesk custom exceptions."""
    log = logger.warning if exc.http_status < 500 else logger.error
    log(
        "wiredesk_error",
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        path=str(request.url.path),
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.on_event("startup")
async def startup_event() -> None:
    """Log configuration on startup."""
    logger.info(
        "Starting WireDesk API",
        debug=settings.debug,
        version=__version__,
        environment=settings.environment,
    )

    if settings.sentry_dsn:
        logger.info("Sentry error tracking enabled", environment=settings.environment)
    else:
        logger.warning("Sentry error tracking not configured (SENTRY_DSN not set)")

    if not settings.email_enabled:
        logger.warning("Email dispatch not configured (RESEND_API_KEY not set)")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Cleanup on application shutdown."""
    logger.info("Shutting down WireDesk API")


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}
