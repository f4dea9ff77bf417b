"""
Wire transfer submission pipeline.

Validate -> render -> dispatch, once per request. Any failure stops the
pipeline and propagates; nothing is sent unless the letter rendered, and
the letter only ever leaves as an email attachment.
"""
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import structlog
from starlette.concurrency import run_in_threadpool

from wiredesk.config import Settings, get_settings
from wiredesk.models.wire_transfer import RenderedDocument, WireTransferRequest
from wiredesk.services.email_service import (
    DispatchResult,
    ResendEmailDispatcher,
    WireTransferSummary,
)
from wiredesk.services.pdf_renderer import TableLayout, render_wire_transfer_pdf
from wiredesk.validation import validate_required_fields

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a successful submission."""

    ref: str
    page_count: int
    message_id: Optional[str]


class WireTransferService:
    """Runs a submitted wire transfer through validation, rendering and email."""

    def __init__(
        self,
        dispatcher: Optional[ResendEmailDispatcher] = None,
        settings: Optional[Settings] = None,
        renderer: Callable[..., RenderedDocument] = render_wire_transfer_pdf,
    ):
        self.settings = settings or get_settings()
        self.dispatcher = dispatcher or ResendEmailDispatcher(self.settings)
        self.renderer = renderer
        self.layout = TableLayout(measure_wrapped_text=self.settings.pdf_measure_wrapped_text)

    async def submit(self, data: Mapping[str, Any]) -> SubmissionResult:
        """
        Process one submission.

        Raises:
            MissingFieldError: A required field is absent or empty
            RenderError: The letter could not be produced
            DispatchError: The email was not accepted by the provider
        """
        validate_required_fields(data)
        request = WireTransferRequest.from_mapping(data)
        logger.info(
            "wire_transfer_received",
            ref=request.ref,
            currency=request.currency,
        )

        # reportlab is CPU-bound and synchronous; keep it off the event loop
        document: RenderedDocument = await run_in_threadpool(
            self.renderer, request, layout=self.layout
        )

        summary = WireTransferSummary.from_request(request)
        result: DispatchResult = await self.dispatcher.send_wire_transfer(document.content, summary)

        logger.info(
            "wire_transfer_submitted",
            ref=request.ref,
            pages=document.page_count,
            message_id=result.message_id,
        )
        return SubmissionResult(
            ref=request.ref,
            page_count=document.page_count,
            message_id=result.message_id,
        )
