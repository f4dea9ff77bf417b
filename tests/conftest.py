"""
Pytest configuration and fixtures.
"""
import json
from io import BytesIO
from typing import Any, Callable, Dict, Generator, List, Optional

import httpx
import pdfplumber
import pytest
from fastapi.testclient import TestClient

from wiredesk.api.routes.wire_transfer import get_wire_transfer_service
from wiredesk.config import Settings
from wiredesk.main import app
from wiredesk.middleware.rate_limit import limiter
from wiredesk.models.wire_transfer import WireTransferRequest
from wiredesk.services.email_service import ResendEmailDispatcher
from wiredesk.services.wire_transfer_service import WireTransferService


class FakeResend:
    """Stands in for the Resend API behind an httpx.MockTransport."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Dict[str, Any] = {"id": "email_123"}
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_payload(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def sample_submission() -> Dict[str, Any]:
    """A complete submission as the form posts it."""
    return {
        "ref": "WT-2024-001",
        "date": "15 de marzo de 2024",
        "amount": 1234.5,
        "currency": "USD",
        "beneficiario": "ACME Corporation",
        "dirBeneficiario": "1 Main Street, New York, NY 10001",
        "bancoBeneficiario": "JPMorgan Chase Bank",
        "dirBanco": "270 Park Avenue, New York, NY 10017",
        "swiftBeneficiario": "CHASUS33",
        "ibanBeneficiario": "000123456789",
        "bancoIntermediario": "Citibank",
        "ciudadIntermediario": "New York",
        "swiftIntermediario": "CITIUS33",
        "aba": "021000089",
        "submitterName": "Ana García",
        "submitterEmail": "ana@example.com",
        "referencia": "Invoice 42",
    }


@pytest.fixture
def wire_request(sample_submission: Dict[str, Any]) -> WireTransferRequest:
    return WireTransferRequest.from_mapping(sample_submission)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a fake API key and no .env lookup."""
    return Settings(
        _env_file=None,
        resend_api_key="re_test_key",
        resend_api_url="https://api.resend.test/emails",
        wire_from_email="Wire Requests <noreply@example.com>",
        wire_to_emails=["treasury@example.com"],
    )


@pytest.fixture
def fake_resend() -> FakeResend:
    return FakeResend()


@pytest.fixture
def dispatcher(test_settings: Settings, fake_resend: FakeResend) -> ResendEmailDispatcher:
    return ResendEmailDispatcher(test_settings, transport=fake_resend.transport)


@pytest.fixture
def client(
    test_settings: Settings,
    dispatcher: ResendEmailDispatcher,
) -> Generator[TestClient, None, None]:
    """Test client whose submissions go to the fake email provider."""

    def override_service() -> WireTransferService:
        return WireTransferService(dispatcher=dispatcher, settings=test_settings)

    app.dependency_overrides[get_wire_transfer_service] = override_service
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def pdf_pages_text() -> Callable[[bytes], List[str]]:
    """Extract the text of every page of a PDF."""

    def extract(content: bytes) -> List[str]:
        with pdfplumber.open(BytesIO(content)) as pdf:
            return [page.extract_text() or "" for page in pdf.pages]

    return extract
