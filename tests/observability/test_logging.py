"""
Test suite for logging configuration and helpers.

System role: Verification of structured logging and correlation ids
"""

import json
import logging

import pytest

from chat_relay.core.exceptions import StoreError
from chat_relay.observability import (
    clear_correlation_id,
    configure_logging,
    correlation_scope,
    get_correlation_id,
    set_correlation_id,
)
from chat_relay.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from chat_relay.observability.logger import CorrelationIdFilter, create_json_formatter


@pytest.fixture
def restore_root_logger():
    """Restore root handlers replaced by configure_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestCorrelationId:
    """Test suite for correlation id context helpers."""

    def test_should_set_and_clear(self) -> None:
        """Test an explicit id is stored and cleared."""
        assert set_correlation_id("req-1") == "req-1"
        assert get_correlation_id() == "req-1"

        clear_correlation_id()

        assert get_correlation_id() == ""

    def test_should_generate_when_missing(self) -> None:
        """Test a new id is generated when none is given."""
        generated = set_correlation_id()

        assert generated
        assert get_correlation_id() == generated
        clear_correlation_id()

    def test_scope_should_restore_previous_id(self) -> None:
        """Test a scoped id is visible inside the block only."""
        set_correlation_id("outer")

        with correlation_scope("inner") as bound:
            assert bound == "inner"
            assert get_correlation_id() == "inner"

        assert get_correlation_id() == "outer"
        clear_correlation_id()


class TestJsonLogging:
    """Test suite for the JSON formatter and correlation filter."""

    def test_record_should_carry_service_and_correlation(self) -> None:
        """Test JSON output includes renamed fields and injected context."""
        # Arrange
        record = logging.LogRecord("chat_relay.test", logging.INFO, __file__, 1, "hello", None, None)
        record.connection_id = "conn-1"
        CorrelationIdFilter("chat-relay", lambda: "req-9").filter(record)

        # Act
        output = json.loads(create_json_formatter().format(record))

        # Assert
        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["logger"] == "chat_relay.test"
        assert output["service"] == "chat-relay"
        assert output["correlation_id"] == "req-9"
        assert output["connection_id"] == "conn-1"

    def test_filter_should_keep_explicit_correlation(self) -> None:
        """Test a correlation id passed through extra is preserved."""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
        record.correlation_id = "explicit"

        CorrelationIdFilter("svc", lambda: "context").filter(record)

        assert record.correlation_id == "explicit"

    def test_configure_logging_should_install_single_handler(self, restore_root_logger) -> None:
        """Test configuration replaces root handlers."""
        configure_logging(level="debug", log_format="json", service_name="svc")

        assert len(restore_root_logger.handlers) == 1
        assert restore_root_logger.level == logging.DEBUG

    @pytest.mark.parametrize("kwargs", [{"level": "LOUD"}, {"log_format": "xml"}])
    def test_configure_logging_should_reject_invalid_options(self, kwargs) -> None:
        """Test unknown levels and formats are rejected."""
        with pytest.raises(ValueError):
            configure_logging(**kwargs)


class TestLogUtils:
    """Test suite for safe structured logging helpers."""

    def test_safe_log_value_should_summarize_and_truncate(self) -> None:
        """Test collections are summarized and long strings truncated."""
        assert safe_log_value([1, 2, 3]) == "list(3 items)"
        assert safe_log_value({"a": 1}) == "dict(1 keys)"
        assert safe_log_value(7) == 7
        assert safe_log_value(None) is None
        assert safe_log_value("x" * 600).startswith("x" * 500 + "... (truncated, 600 total)")

    def test_log_with_context_should_attach_extra(self, caplog) -> None:
        """Test context keys become record attributes."""
        logger = logging.getLogger("chat_relay.tests.log_utils")

        with caplog.at_level(logging.INFO, logger="chat_relay.tests.log_utils"):
            log_with_context(logger, logging.INFO, "event", connection_id="conn-1", name="clash")

        record = caplog.records[-1]
        assert record.connection_id == "conn-1"
        assert record.ctx_name == "clash"
        assert record.name == "chat_relay.tests.log_utils"

    def test_log_exception_should_record_error_type(self, caplog) -> None:
        """Test exception helpers record type, message and traceback."""
        logger = logging.getLogger("chat_relay.tests.log_utils")

        with caplog.at_level(logging.ERROR, logger="chat_relay.tests.log_utils"):
            try:
                raise RuntimeError("boom")
            except RuntimeError as e:
                log_exception_with_context(logger, "failed", e, connection_id="conn-1")

        record = caplog.records[-1]
        assert record.error_type == "RuntimeError"
        assert record.error_msg == "boom"
        assert record.exc_info is not None

    def test_log_exception_should_merge_relay_error_details(self, caplog) -> None:
        """Test details of a relay exception land on the record, context first."""
        logger = logging.getLogger("chat_relay.tests.log_utils")
        error = StoreError("put failed", operation="create_session", details={"table": "t"})

        with caplog.at_level(logging.ERROR, logger="chat_relay.tests.log_utils"):
            log_exception_with_context(logger, "failed", error, table="override")

        record = caplog.records[-1]
        assert record.operation == "create_session"
        assert record.table == "override"
        assert record.error_type == "StoreError"
