"""Event parsing and configuration helpers for the Lambda handlers."""

from chat_relay.core.websocket_gateway.lambda_utils.config import (
    configure_secrets,
    validate_environment,
)
from chat_relay.core.websocket_gateway.lambda_utils.event_parser import parse_websocket_event

__all__ = ["configure_secrets", "parse_websocket_event", "validate_environment"]
