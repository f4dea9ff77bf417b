"""
Email dispatch service.

Sends the rendered wire transfer letter through the Resend HTTP API with an
HTML summary of the request. One attempt per call; failures are raised,
never retried.
"""
import base64
import html
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import httpx
import structlog

from wiredesk.config import Settings, get_settings
from wiredesk.exceptions import DispatchError
from wiredesk.middleware.logging import log_performance
from wiredesk.models.wire_transfer import WireTransferRequest
from wiredesk.services.formatting import format_money

logger = structlog.get_logger(__name__)


SUMMARY_HTML_TEMPLATE = """
<div style="font-family:Arial,sans-serif;max-width:600px;color:#333;">
  <h2 style="color:#1a1a2e;border-bottom:2px solid #c9a84c;padding-bottom:8px;">
    Wire Transfer Request
  </h2>
  <table style="width:100%;border-collapse:collapse;margin:16px 0;font-size:14px;">
    <tr><td style="padding:8px;color:#888;width:40%;">Reference</td><td style="padding:8px;font-weight:bold;">{ref}</td></tr>
    <tr style="background:#faf9f7;"><td style="padding:8px;color:#888;">Submitted by</td><td style="padding:8px;">{submitter_name} ({submitter_email})</td></tr>
    <tr><td style="padding:8px;color:#888;">Amount</td><td style="padding:8px;font-weight:bold;">{amount}</td></tr>
    <tr style="background:#faf9f7;"><td style="padding:8px;color:#888;">Beneficiario</td><td style="padding:8px;">{beneficiary}</td></tr>
    <tr><td style="padding:8px;color:#888;">Bank</td><td style="padding:8px;">{bank}</td></tr>
    <tr style="background:#faf9f7;"><td style="padding:8px;color:#888;">Swift</td><td style="padding:8px;">{swift}</td></tr>
    <tr><td style="padding:8px;color:#888;">IBAN / Account</td><td style="padding:8px;">{iban}</td></tr>
    <tr style="background:#faf9f7;"><td style="padding:8px;color:#888;">Reference/Purpose</td><td style="padding:8px;">{purpose}</td></tr>
    <tr><td style="padding:8px;color:#888;">Date</td><td style="padding:8px;">{date}</td></tr>
  </table>
  <p style="font-size:12px;color:#aaa;">PDF attached, ready to sign and forward to BankInter.</p>
</div>
"""

EMPTY_PURPOSE = "–"


@dataclass(frozen=True)
class WireTransferSummary:
    """Fields shown in the summary email."""

    ref: str
    submitter_name: str
    submitter_email: str
    amount: str
    beneficiary: str
    bank: str
    swift: str
    iban: str
    purpose: str
    date: str

    @classmethod
    def from_request(cls, request: WireTransferRequest) -> "WireTransferSummary":
        return cls(
            ref=request.ref,
            submitter_name=request.submitterName,
            submitter_email=request.submitterEmail,
            amount=format_money(request.amount, request.currency),
            beneficiary=request.beneficiario,
            bank=request.bancoBeneficiario,
            swift=request.swiftBeneficiario,
            iban=request.ibanBeneficiario,
            purpose=request.referencia or EMPTY_PURPOSE,
            date=request.date,
        )

    @property
    def subject(self) -> str:
        return f"Wire Transfer Request {self.ref} – {self.beneficiary} – {self.amount}"

    @property
    def attachment_filename(self) -> str:
        return f"Wire_Transfer_{self.ref}.pdf"


@dataclass(frozen=True)
class DispatchResult:
    """Provider acknowledgement for a sent email."""

    message_id: Optional[str]
    status_code: int


def render_summary_html(summary: WireTransferSummary) -> str:
    """Fill the summary template, HTML-escaping every value."""
    escaped = {key: html.escape(str(value)) for key, value in asdict(summary).items()}
    return SUMMARY_HTML_TEMPLATE.format(**escaped)


class ResendEmailDispatcher:
    """Sends wire transfer letters through the Resend email API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.timeout = self.settings.dispatch_timeout_seconds
        # Tests swap in httpx.MockTransport here
        self._transport = transport

    def build_payload(self, pdf_bytes: bytes, summary: WireTransferSummary) -> Dict[str, Any]:
        """Build the JSON body for the Resend /emails endpoint."""
        recipients: List[str] = list(self.settings.wire_to_emails)
        return {
            "from": self.settings.wire_from_email,
            "to": recipients,
            "subject": summary.subject,
            "html": render_summary_html(summary),
            "attachments": [
                {
                    "filename": summary.attachment_filename,
                    "content": base64.b64encode(pdf_bytes).decode("ascii"),
                }
            ],
        }

    @log_performance("email_dispatch")
    async def send_wire_transfer(
        self,
        pdf_bytes: bytes,
        summary: WireTransferSummary,
    ) -> DispatchResult:
        """
        Send the letter as an attachment with the HTML summary as body.

        Args:
            pdf_bytes: Rendered PDF
            summary: Fields for the subject and summary table

        Returns:
            DispatchResult with the provider's message id

        Raises:
            DispatchError: If the provider is not configured, unreachable,
                or answers with a non-2xx status
        """
        if not self.settings.email_enabled:
            logger.warning("wire_email_disabled", ref=summary.ref)
            raise DispatchError("Email provider is not configured (RESEND_API_KEY missing)")

        payload = self.build_payload(pdf_bytes, summary)
        headers = {
            "Authorization": f"Bearer {self.settings.resend_api_key}",
            "Content-Type": "application/json",
            "User-Agent": "WireDesk/1.0",
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(
                    self.settings.resend_api_url,
                    json=payload,
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            logger.error("wire_email_timeout", ref=summary.ref, error=str(e))
            raise DispatchError("Email provider timed out") from e
        except httpx.RequestError as e:
            logger.error("wire_email_request_error", ref=summary.ref, error=str(e))
            raise DispatchError(f"Email provider request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            message = _provider_error_message(response)
            logger.error(
                "wire_email_failed",
                ref=summary.ref,
                status_code=response.status_code,
                error=message,
            )
            raise DispatchError(message, status_code=response.status_code)

        message_id = _provider_message_id(response)
        logger.info(
            "wire_email_sent",
            ref=summary.ref,
            message_id=message_id,
            recipients=len(payload["to"]),
        )
        return DispatchResult(message_id=message_id, status_code=response.status_code)


def _provider_error_message(response: httpx.Response) -> str:
    """Pull Resend's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Email provider returned HTTP {response.status_code}"


def _provider_message_id(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("id")
    return None
