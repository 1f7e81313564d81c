"""
Input validation for inbound chat payloads and tenant identifiers.

A defense-in-depth filter, not a full HTML sanitizer: rejects structural
injection markers and strips the characters the widget would render.
Every accepted text is a fixed point of validate_message.

Dependencies: chat_relay.core.exceptions, chat_relay.models.messages
System role: Pure validation layer ahead of the orchestrator
"""

import re
from typing import Any

from chat_relay.core.exceptions import ValidationError
from chat_relay.models.messages import InboundMessage

MAX_MESSAGE_LENGTH = 500
MAX_TENANT_ID_LENGTH = 50

_HARMFUL_PATTERNS = (
    re.compile(r"script\s*:", re.IGNORECASE),
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"document\s*\.", re.IGNORECASE),
)
_ANGLE_BRACKETS = re.compile(r"[<>]")
_SCRIPT_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_TENANT_ID_DISALLOWED = re.compile(r"[^a-zA-Z0-9-]")


def contains_harmful_content(text: str) -> bool:
    """Return True when text matches any injection pattern."""
    return any(pattern.search(text) for pattern in _HARMFUL_PATTERNS)


def sanitize_text(text: str) -> str:
    """
    Strip markup characters and script protocols, trim, and cap length.

    Args:
        text: Raw message text

    Returns:
        str: Sanitized text of at most MAX_MESSAGE_LENGTH characters
    """
    cleaned = _ANGLE_BRACKETS.sub("", text)
    while _SCRIPT_PROTOCOL.search(cleaned):
        cleaned = _SCRIPT_PROTOCOL.sub("", cleaned)
    return cleaned.strip()[:MAX_MESSAGE_LENGTH].strip()


def validate_message(payload: Any) -> InboundMessage:
    """
    Validate and sanitize an inbound chat payload.

    Args:
        payload: Decoded JSON body, expected {"text": str, "sessionId"?: str}

    Returns:
        InboundMessage: Message with sanitized text

    Raises:
        ValidationError: Payload shape, length, or content is not acceptable
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid message format", field="body")

    text = payload.get("text")
    if not text or not isinstance(text, str):
        raise ValidationError("Message text is required and must be a string", field="text")

    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(
            "Message too long",
            field="text",
            details={"length": len(text), "max_length": MAX_MESSAGE_LENGTH},
        )

    if contains_harmful_content(text):
        raise ValidationError("Message contains inappropriate content", field="text")

    sanitized = sanitize_text(text)
    # Stripping brackets can join fragments into a new pattern ("scr<ipt:")
    if contains_harmful_content(sanitized):
        raise ValidationError("Message contains inappropriate content", field="text")
    if not sanitized:
        raise ValidationError("Message text is empty after sanitization", field="text")

    session_id = payload.get("sessionId")
    return InboundMessage(
        text=sanitized,
        session_id=session_id if isinstance(session_id, str) else None,
    )


def validate_tenant_id(tenant_id: Any, default: str) -> str:
    """
    Coerce arbitrary input into a safe tenant identifier.

    Keeps alphanumerics and hyphens, lower-cases, truncates to 50 characters.
    Never fails: empty or invalid input falls back to the default tenant.

    Args:
        tenant_id: Raw identifier from query string or header
        default: Tenant used when nothing usable remains

    Returns:
        str: Sanitized tenant identifier
    """
    if not tenant_id or not isinstance(tenant_id, str):
        return default

    sanitized = _TENANT_ID_DISALLOWED.sub("", tenant_id).lower()[:MAX_TENANT_ID_LENGTH]
    return sanitized or default
