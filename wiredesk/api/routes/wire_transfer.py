"""
Wire transfer submission route.

Accepts the submission form's JSON, runs the pipeline and answers with the
reference. Errors are turned into JSON envelopes by the app's
WireDeskError handler.
"""
import json
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from wiredesk.middleware.rate_limit import limiter, submit_rate_limit
from wiredesk.services.wire_transfer_service import WireTransferService

logger = structlog.get_logger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class SubmitResponse(BaseModel):
    """Acknowledgement of an accepted wire transfer."""

    success: bool = Field(True, description="Always true on a 200 response")
    ref: str = Field(..., description="Reference id of the submitted wire transfer")


class ErrorResponse(BaseModel):
    """Error envelope returned for every failure."""

    error: bool = True
    error_code: str = Field(..., description="WireDesk error code, e.g. WD-100")
    message: str = Field(..., description="Human-readable error message")
    details: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Dependencies
# =============================================================================

def get_wire_transfer_service() -> WireTransferService:
    """Build a service per request; nothing is shared between submissions."""
    return WireTransferService()


async def read_submission(request: Request) -> Dict[str, Any]:
    """
    Read the JSON body as a flat record.

    Anything that is not a JSON object is treated as an empty record so it
    fails validation on the first required field.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.info("wire_transfer_invalid_json")
        return {}
    return body if isinstance(body, dict) else {}


# =============================================================================
# API Endpoints
# =============================================================================

@router.post(
    "/submit",
    response_model=SubmitResponse,
    responses={
        400: {"model": ErrorResponse, "description": "A required field is missing"},
        429: {"model": ErrorResponse, "description": "Too many submissions"},
        500: {"model": ErrorResponse, "description": "The letter could not be rendered"},
        502: {"model": ErrorResponse, "description": "The email provider rejected the message"},
    },
    summary="Submit a wire transfer request",
    description="Render the wire transfer letter as PDF and email it to the treasury mailbox.",
)
@limiter.limit(submit_rate_limit)
async def submit_wire_transfer(
    request: Request,
    data: Dict[str, Any] = Depends(read_submission),
    service: WireTransferService = Depends(get_wire_transfer_service),
) -> SubmitResponse:
    """Validate, render and email a wire transfer request."""
    result = await service.submit(data)
    return SubmitResponse(success=True, ref=result.ref)
