"""Tests for observability utilities."""

import json
import logging

from delivery_intake.observability.correlation import (
    correlation_scope,
    get_correlation_id,
)
from delivery_intake.observability.logging import JsonFormatter, get_logger
from delivery_intake.observability.redaction import (
    redact_string,
    redact_value,
    safe_log_context,
)


class TestRedaction:
    """Tests for redaction helpers."""

    def test_redact_phone_number(self):
        result = redact_string("Livré 612345678")
        assert "612345678" not in result
        assert "[REDACTED]" in result

    def test_redact_masked_phone(self):
        assert "345678" not in redact_string("client 6xx345678")

    def test_redact_spaced_phone(self):
        result = redact_string("Numéro 651 07 35 74")
        assert "651" not in result

    def test_redact_jid(self):
        result = redact_string("from 237699000000@c.us")
        assert "237699000000" not in result
        assert "@c.us" not in result

    def test_amounts_are_kept(self):
        assert redact_string("Collecté 15000") == "Collecté 15000"

    def test_redact_value_dict_only_keys(self):
        result = redact_value({"phone": "612345678", "items": "robe"})
        assert "612345678" not in result
        assert "robe" not in result
        assert "phone" in result

    def test_redact_value_list_only_len(self):
        result = redact_value(["a", "b", "c"])
        assert "a" not in result
        assert "len=3" in result

    def test_safe_log_context(self):
        ctx = safe_log_context(phone="612345678", order_id=42, via_reply=True, reason=None)
        assert ctx["phone"] == "[REDACTED]"
        assert ctx["order_id"] == "42"
        assert ctx["via_reply"] == "true"
        assert ctx["reason"] == "null"


class TestCorrelation:
    def test_scope_sets_and_resets(self):
        with correlation_scope("cid-1") as cid:
            assert cid == "cid-1"
            assert get_correlation_id() == "cid-1"
        assert get_correlation_id() == ""

    def test_scope_generates_id(self):
        with correlation_scope() as cid:
            assert cid


class TestJsonFormatter:
    def _record(self, **extra):
        record = logging.LogRecord(
            name="delivery_intake.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="order created",
            args=(),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_fields_and_correlation_id(self):
        with correlation_scope("cid-2"):
            line = JsonFormatter().format(self._record(extra_fields={"order_id": "7"}))

        payload = json.loads(line)
        assert payload["message"] == "order created"
        assert payload["level"] == "INFO"
        assert payload["correlationId"] == "cid-2"
        assert payload["order_id"] == "7"

    def test_no_correlation_id_outside_scope(self):
        payload = json.loads(JsonFormatter().format(self._record()))
        assert "correlationId" not in payload


class TestGetLogger:
    def test_configured_once(self):
        first = get_logger("delivery_intake.test_once")
        second = get_logger("delivery_intake.test_once")

        assert first is second
        assert len(first.handlers) == 1
        assert first.propagate is False

    def test_level_override(self):
        logger = get_logger("delivery_intake.test_level", level="DEBUG")

        assert logger.level == logging.DEBUG
