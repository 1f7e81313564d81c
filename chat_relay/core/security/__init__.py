"""Inbound payload validation and sanitization."""

from chat_relay.core.security.input_validator import (
    MAX_MESSAGE_LENGTH,
    MAX_TENANT_ID_LENGTH,
    contains_harmful_content,
    sanitize_text,
    validate_message,
    validate_tenant_id,
)

__all__ = [
    "MAX_MESSAGE_LENGTH",
    "MAX_TENANT_ID_LENGTH",
    "contains_harmful_content",
    "sanitize_text",
    "validate_message",
    "validate_tenant_id",
]
