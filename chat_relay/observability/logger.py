"""
Logging configuration.

Installs a single root handler with either a plain text formatter or a
JSON formatter. Both carry the service name and current correlation id.

Dependencies: logging (stdlib), python-json-logger
System role: Process-wide logging setup for Lambda and the local server
"""

import logging
import sys
from collections.abc import Callable

from pythonjsonlogger.json import JsonFormatter

from chat_relay.observability.correlation import get_correlation_id

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
JSON_FIELDS = ("asctime", "levelname", "name", "message", "correlation_id", "service")


class CorrelationIdFilter(logging.Filter):
    """Injects correlation_id and service into every record."""

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] = get_correlation_id,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter

    def filter(self, record: logging.LogRecord) -> bool:
        # Keep a correlation_id passed explicitly through `extra`
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing or self._get_correlation_id() or "-"
        record.service = self._service_name
        return True


def create_json_formatter() -> JsonFormatter:
    """JSON formatter with level/logger renamed to their short names."""
    return JsonFormatter(
        " ".join(f"%({field})s" for field in JSON_FIELDS),
        rename_fields={"levelname": "level", "name": "logger"},
    )


def configure_logging(
    level: str = "INFO",
    log_format: str = "text",
    service_name: str = "chat-relay",
) -> None:
    """
    Configure root logging once per process.

    Args:
        level: Log level name
        log_format: "text" or "json"
        service_name: Value of the `service` field

    Raises:
        ValueError: Unknown log level or format
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}")
    if log_format not in ("text", "json"):
        raise ValueError(f"Invalid log format: {log_format}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level_upper)
    handler.setFormatter(
        create_json_formatter() if log_format == "json" else logging.Formatter(TEXT_FORMAT)
    )
    handler.addFilter(CorrelationIdFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Lambda pre-installs a handler; replace it to avoid duplicate lines
    root.handlers = [handler]

    # Chatty third-party loggers
    for name in ("botocore", "boto3", "urllib3", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
