"""
Per-event correlation IDs.

Every WebSocket event, sweep run and local HTTP request is tagged with one
ID so its log lines can be joined in CloudWatch. Lambda handlers bind the
API Gateway request id; the local server binds X-Correlation-ID or a fresh
uuid4.

Dependencies: contextvars
System role: Request tracing across service boundaries
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_current_id: ContextVar[str] = ContextVar("chat_relay_correlation_id", default="")


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind an ID to the current context, generating one when none is given."""
    value = correlation_id or uuid.uuid4().hex
    _current_id.set(value)
    return value


def get_correlation_id() -> str:
    """Return the bound ID, or an empty string outside an event."""
    return _current_id.get()


def clear_correlation_id() -> None:
    _current_id.set("")


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Bind an ID for the duration of a block and restore the previous one.

    Args:
        correlation_id: Upstream request id (generates one if None)

    Yields:
        str: The bound ID
    """
    value = correlation_id or uuid.uuid4().hex
    token = _current_id.set(value)
    try:
        yield value
    finally:
        _current_id.reset(token)
