"""
Unit tests for logging utilities.
"""
import pytest

from wiredesk.middleware.logging import (
    correlation_id,
    add_correlation_id_processor,
    log_performance,
    redact_sensitive_data,
    redact_sensitive_processor,
    redact_sentry_event,
    timed_operation,
)


class TestRedactSensitiveData:
    """Tests for redacting bank details and credentials."""

    def test_redacts_bank_fields(self):
        data = {
            "ibanBeneficiario": "ES9121000418450200051332",
            "aba": "021000089",
            "beneficiario": "ACME Corporation",
        }

        redacted = redact_sensitive_data(data)

        assert redacted["ibanBeneficiario"] == "[REDACTED]"
        assert redacted["aba"] == "[REDACTED]"
        assert redacted["beneficiario"] == "ACME Corporation"

    def test_redacts_nested_and_lists(self):
        data = {
            "headers": {"Authorization": "Bearer re_123"},
            "items": [{"api_key": "k"}, "plain"],
        }

        redacted = redact_sensitive_data(data)

        assert redacted["headers"]["Authorization"] == "[REDACTED]"
        assert redacted["items"] == [{"api_key": "[REDACTED]"}, "plain"]

    def test_redacts_submitter_email(self):
        """Test that contact data of the submitter never reaches the logs."""
        redacted = redact_sensitive_data({"submitterEmail": "ana@example.com", "submitterName": "Ana"})

        assert redacted == {"submitterEmail": "[REDACTED]", "submitterName": "Ana"}

    def test_walks_tuples(self):
        redacted = redact_sensitive_data({"rows": ({"iban": "ES91"}, "plain")})

        assert redacted["rows"] == ({"iban": "[REDACTED]"}, "plain")

    def test_non_dict_passthrough(self):
        assert redact_sensitive_data("text") == "text"

    def test_processor_redacts_event(self):
        event = redact_sensitive_processor(None, "info", {"event": "x", "token": "abc"})

        assert event == {"event": "x", "token": "[REDACTED]"}


class TestRedactSentryEvent:
    """Tests for the Sentry before_send hook."""

    def test_redacts_request_and_extra(self):
        event = {
            "request": {
                "data": {"ibanBeneficiario": "ES91", "amount": 10},
                "headers": {"Authorization": "Bearer re_123", "Accept": "*/*"},
                "url": "http://testserver/api/submit",
            },
            "extra": {"submitterEmail": "ana@example.com"},
        }

        redacted = redact_sentry_event(event, {})

        assert redacted["request"]["data"] == {"ibanBeneficiario": "[REDACTED]", "amount": 10}
        assert redacted["request"]["headers"] == {"Authorization": "[REDACTED]", "Accept": "*/*"}
        assert redacted["request"]["url"] == "http://testserver/api/submit"
        assert redacted["extra"] == {"submitterEmail": "[REDACTED]"}

    def test_event_without_request(self):
        assert redact_sentry_event({"message": "boom"}) == {"message": "boom"}


class TestCorrelationProcessor:
    """Tests for correlation ID injection."""

    def test_adds_current_correlation_id(self):
        token = correlation_id.set("abc-123")
        try:
            event = add_correlation_id_processor(None, "info", {"event": "x"})
        finally:
            correlation_id.reset(token)

        assert event["correlation_id"] == "abc-123"

    def test_outside_request_adds_nothing(self):
        event = add_correlation_id_processor(None, "info", {"event": "x"})

        assert "correlation_id" not in event


class TestLogPerformance:
    """Tests for the timing decorator."""

    def test_sync_function(self):
        @log_performance("add")
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert add.__name__ == "add"

    def test_sync_function_reraises(self):
        @log_performance("fail")
        def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            fail()

    @pytest.mark.asyncio
    async def test_async_function(self):
        @log_performance("async_add")
        async def add(a, b):
            return a + b

        assert await add(2, 3) == 5

    def test_timed_operation_reraises(self):
        with pytest.raises(ValueError):
            with timed_operation("parse"):
                raise ValueError("bad")
