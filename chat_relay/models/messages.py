"""
WebSocket message schemas.

Inbound chat payload and the two outbound push shapes.

Dependencies: pydantic
System role: Client-facing message contracts
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp(moment: datetime | None = None) -> str:
    """Format a UTC ISO-8601 timestamp with millisecond precision and a Z suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OutboundMessageType(str, Enum):
    """Server-to-client message types."""

    RESPONSE = "response"
    ERROR = "error"


class InboundMessage(BaseModel):
    """
    Validated client chat message.

    Attributes:
        text: Sanitized message text
        session_id: Client-supplied session id (informational only)
    """

    model_config = ConfigDict(populate_by_name=True)

    text: str
    session_id: str | None = Field(default=None, alias="sessionId")


class OutboundMessage(BaseModel):
    """Message pushed back over the connection."""

    type: OutboundMessageType
    message: str
    timestamp: str = Field(default_factory=utc_timestamp)
    company_name: str | None = Field(default=None, serialization_alias="companyName")

    @classmethod
    def response(cls, message: str, company_name: str) -> "OutboundMessage":
        """Build a successful reply."""
        return cls(type=OutboundMessageType.RESPONSE, message=message, company_name=company_name)

    @classmethod
    def error(cls, message: str) -> "OutboundMessage":
        """Build an error notice."""
        return cls(type=OutboundMessageType.ERROR, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
