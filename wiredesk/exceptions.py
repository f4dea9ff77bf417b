"""
Custom exceptions for WireDesk.

Provides a hierarchy of exceptions with error codes for consistent error handling.
Every failure is terminal for the request it belongs to.
"""
from typing import Optional, Dict, Any


class WireDeskError(Exception):
    """
    Base exception for all WireDesk errors.

    Attributes:
        error_code: Unique error code (e.g., WD-100)
        message: Human-readable error message
        details: Additional error context
    """
    error_code: str = "WD-000"
    http_status: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# Validation Errors (WD-1XX)
class MissingFieldError(WireDeskError):
    """A required request field is absent or empty."""
    error_code = "WD-100"
    http_status = 400

    def __init__(self, field: str, **kwargs):
        self.field = field
        message = f"Missing field: {field}"
        super().__init__(message, details={"field": field}, **kwargs)


# Rendering Errors (WD-2XX)
class RenderError(WireDeskError):
    """The PDF letter could not be produced."""
    error_code = "WD-200"
    http_status = 500

    def __init__(
        self,
        message: str = "Failed to render wire transfer document",
        cause: Optional[BaseException] = None,
        **kwargs,
    ):
        self.cause = cause
        details = kwargs.pop("details", {})
        if cause is not None:
            details.setdefault("cause", type(cause).__name__)
        super().__init__(message, details=details, **kwargs)


# Dispatch Errors (WD-3XX)
class DispatchError(WireDeskError):
    """The email provider did not accept the message."""
    error_code = "WD-300"
    http_status = 502

    def __init__(
        self,
        message: str = "Failed to send wire transfer email",
        status_code: Optional[int] = None,
        **kwargs,
    ):
        self.status_code = status_code
        details = kwargs.pop("details", {})
        details.setdefault("service", "resend")
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)
