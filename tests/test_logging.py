"""Tests for the structured logging system (pos_kernel/logging_config.py)."""

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from pos_kernel.domain.checkout import ValidationRejection
from pos_kernel.domain.inventory import StockAlert
from pos_kernel.domain.pricing import PaymentMethod, TenderStatus
from pos_kernel.logging_config import (
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


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "pos_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("checkout_committed", extra={"line_count": 3, "status": "ok"})

        record = _parse_log(stream)
        assert record["line_count"] == 3
        assert record["status"] == "ok"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(terminal_id="till-1", sale_id="SALE-20240614-000001")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["terminal_id"] == "till-1"
        assert record["sale_id"] == "SALE-20240614-000001"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_code_extracted(self):
        """Kernel exceptions carry .code and their context attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        from pos_kernel.exceptions import InvalidProductError

        try:
            raise InvalidProductError("P9", "price", "must be >= 0")
        except InvalidProductError:
            get_logger("test").error("catalog_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "INVALID_PRODUCT"
        assert record["exc_type"] == "InvalidProductError"
        assert record["exc_product_id"] == "P9"
        assert record["exc_field_name"] == "price"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "sale_id" not in record
        assert "terminal_id" not in record

    def test_decimal_uuid_datetime_enum_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        when = datetime(2024, 6, 14, 18, 30, tzinfo=UTC)
        get_logger("test").info(
            "typed_values",
            extra={
                "total": Decimal("85.00"),
                "request_id": uid,
                "at": when,
                "payment_method": PaymentMethod.CARD,
            },
        )

        record = _parse_log(stream)
        assert record["total"] == "85.00"
        assert record["request_id"] == str(uid)
        assert record["at"] == when.isoformat()
        assert record["payment_method"] == "card"

    def test_domain_records_serialized_as_objects(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        rejection = ValidationRejection(
            code="PAYMENT_INSUFFICIENT",
            payment_method=PaymentMethod.CASH,
            total=Decimal("85.00"),
            tendered=Decimal("50.00"),
            tender_status=TenderStatus.PAYMENT_INSUFFICIENT,
            shortfall=Decimal("35.00"),
        )
        get_logger("test").warning(
            "domain_values",
            extra={
                "alert": StockAlert(product_id="2", name="Whisky", stock=7, min_stock=8),
                "rejection": rejection,
                "product_ids": frozenset({"6", "2"}),
            },
        )

        record = _parse_log(stream)
        assert record["alert"] == {
            "product_id": "2", "name": "Whisky", "stock": 7, "min_stock": 8,
        }
        assert record["rejection"]["shortfall"] == "35.00"
        assert record["rejection"]["tender_status"] == "payment_insufficient"
        assert record["product_ids"] == ["2", "6"]

    def test_unknown_objects_fall_back_to_str(self):
        class Terminal:
            def __str__(self):
                return "till-01"

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("opaque", extra={"terminal": Terminal()})

        assert _parse_log(stream)["terminal"] == "till-01"

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO, so the debug line is dropped.
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= record.keys()


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(terminal_id="till-1", session_id="s-1")
        assert LogContext.get_all() == {"terminal_id": "till-1", "session_id": "s-1"}

    def test_clear(self):
        LogContext.set(sale_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(sale_id="outer")
        with LogContext.bind(sale_id="inner"):
            assert LogContext.get_all()["sale_id"] == "inner"
        assert LogContext.get_all()["sale_id"] == "outer"

    def test_bind_restores_none(self):
        assert "sale_id" not in LogContext.get_all()
        with LogContext.bind(sale_id="temp"):
            assert LogContext.get_all()["sale_id"] == "temp"
        assert "sale_id" not in LogContext.get_all()

    def test_bind_ignores_unknown_fields(self):
        with LogContext.bind(sale_id="s", not_a_field="x"):
            assert LogContext.get_all() == {"sale_id": "s"}

    def test_all_fields(self):
        LogContext.set(
            terminal_id="t",
            session_id="s",
            sale_id="n",
            operator_id="o",
            correlation_id="c",
        )
        ctx = LogContext.get_all()
        assert len(ctx) == 5
        assert ctx["operator_id"] == "o"


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        assert len(logging.getLogger("pos_kernel").handlers) == 1

    def test_get_logger_returns_child(self):
        assert get_logger("services.checkout").name == "pos_kernel.services.checkout"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "pos_kernel.deep.nested.module"
