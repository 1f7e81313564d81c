"""
Structured logging helpers for relay events.

Context values are reduced to JSON-friendly scalars before they reach a
handler, so a stray session record or payload never ends up verbatim in
CloudWatch. Relay exceptions contribute their details dict.

Dependencies: logging (stdlib), chat_relay.core.exceptions
System role: Logging helper functions
"""

import logging
from typing import Any

from chat_relay.core.exceptions import ChatRelayException

# Attributes of LogRecord itself; `extra` may not overwrite them
_RESERVED_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def safe_log_value(value: Any, max_length: int = 500) -> Any:
    """
    Reduce a value to something a JSON log line can hold.

    Scalars pass through. Collections become a size summary. Anything else
    is rendered with str() and cut at max_length.

    Args:
        value: Value to convert
        max_length: Longest string kept before truncation

    Returns:
        Any: None, bool, int, float or str
    """
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"{type(value).__name__}({len(value)} items)"

    try:
        text = value if isinstance(value, str) else str(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... (truncated, {len(text)} total)"


def _safe_context(context: dict[str, Any]) -> dict[str, Any]:
    safe: dict[str, Any] = {}
    for key, value in context.items():
        name = f"ctx_{key}" if key in _RESERVED_KEYS else key
        safe[name] = safe_log_value(value)
    return safe


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """Log at `level` with every context value passed through safe_log_value."""
    logger.log(level, message, extra=_safe_context(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log a failure at error level with its traceback.

    Details carried by a ChatRelayException are merged under the explicit
    context, which wins on key clashes.

    Args:
        logger: Logger instance
        message: Log message
        exc: The caught exception
        **context: Event context (connection id, tenant, route)
    """
    merged: dict[str, Any] = {}
    if isinstance(exc, ChatRelayException):
        merged.update(exc.details)
    merged.update(context)

    extra = _safe_context(merged)
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.error(message, exc_info=exc, extra=extra)
