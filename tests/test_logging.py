"""Tests for the structured logging system (payroll_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from payroll_kernel.exceptions import LimitExceededError
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_all_logs(stream)[0]
        assert record["message"] == "hello"
        assert record["level"] == "INFO"
        assert record["logger"] == "payroll_kernel.test"
        assert "ts" in record

    def test_extra_fields_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        advance_id = uuid4()
        get_logger("test").info("advance_requested", extra={
            "advance_id": advance_id,
            "amount": Decimal("200000.00"),
            "request_date": date(2025, 3, 1),
        })

        record = _parse_all_logs(stream)[0]
        assert record["advance_id"] == str(advance_id)
        assert record["amount"] == "200000.00"
        assert record["request_date"] == "2025-03-01"

    def test_exception_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise LimitExceededError("emp-1", "300000", "250000")
        except LimitExceededError:
            get_logger("test").exception("request_failed")

        record = _parse_all_logs(stream)[0]
        assert record["exc_type"] == "LimitExceededError"
        assert record["exc_code"] == "ADVANCE_LIMIT_EXCEEDED"
        assert record["exc_limit"] == "250000"
        assert "traceback" in record


class TestLogContext:

    def test_bind_adds_and_restores_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")

        employee_id = uuid4()
        with LogContext.bind(employee_id=employee_id, period="2025-03"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _parse_all_logs(stream)
        assert inside["employee_id"] == str(employee_id)
        assert inside["period"] == "2025-03"
        assert "employee_id" not in outside

    def test_bind_skips_none_and_unknown_fields(self):
        with LogContext.bind(period=None, run_id=uuid4(), unknown="x"):
            fields = LogContext.get_all()
        assert set(fields) == {"run_id"}
        assert LogContext.get_all() == {}

    def test_nested_bind_restores_outer_value(self):
        with LogContext.bind(period="2025-03"):
            with LogContext.bind(period="2025-04"):
                assert LogContext.get_all()["period"] == "2025-04"
            assert LogContext.get_all()["period"] == "2025-03"


class TestConfigureLogging:

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is a no-op
        root = logging.getLogger("payroll_kernel")
        assert h1 in root.handlers
        assert h2 not in root.handlers

    def test_get_logger_returns_child(self):
        assert get_logger("modules.payroll").name == "payroll_kernel.modules.payroll"

    def test_level_filters(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        messages = [r["message"] for r in _parse_all_logs(stream)]
        assert messages == ["kept"]
