"""Domain models and transport schemas."""

from chat_relay.models.events import EventResult, RouteKey, TransportEvent
from chat_relay.models.messages import InboundMessage, OutboundMessage, OutboundMessageType
from chat_relay.models.session import (
    MAX_HISTORY_EXCHANGES,
    Exchange,
    SessionRecord,
    SessionUpdate,
)
from chat_relay.models.tenant import TenantConfiguration

__all__ = [
    "EventResult",
    "Exchange",
    "InboundMessage",
    "MAX_HISTORY_EXCHANGES",
    "OutboundMessage",
    "OutboundMessageType",
    "RouteKey",
    "SessionRecord",
    "SessionUpdate",
    "TenantConfiguration",
    "TransportEvent",
]
