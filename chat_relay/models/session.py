"""
Session domain models.

Durable connection -> conversation records and the typed partial update
applied to them.

Dependencies: pydantic
System role: Session persistence contracts
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from chat_relay.models.tenant import TenantConfiguration

MAX_HISTORY_EXCHANGES = 8


class Exchange(BaseModel):
    """One user message and the assistant reply to it."""

    user: str
    assistant: str
    timestamp: datetime


class SessionRecord(BaseModel):
    """
    Conversation state tied to one connection.

    Attributes:
        connection_id: Transport-assigned connection identifier
        session_id: Generated identifier, immutable once created
        company_id: Sanitized tenant identifier
        company_config: Tenant configuration captured at connect time
        conversation_history: Most recent exchanges, oldest first
        created_at: Row creation time
        last_activity: Time of the last successful update
        expires_at: Absolute expiry (last_activity + TTL window)
        revision: Incremented on every update
    """

    connection_id: str
    session_id: str
    company_id: str
    company_config: TenantConfiguration | None = None
    conversation_history: list[Exchange] = Field(default_factory=list)
    created_at: datetime
    last_activity: datetime
    expires_at: datetime
    revision: int = 0

    def is_expired(self, now: datetime) -> bool:
        """Return True once the expiry timestamp has passed."""
        return self.expires_at < now


class SessionUpdate(BaseModel):
    """
    Enumerated set of session fields a caller may change.

    Fields left as None are not written. History longer than the
    retention window is cut to the most recent exchanges.
    """

    conversation_history: list[Exchange] | None = None
    company_config: TenantConfiguration | None = None

    @field_validator("conversation_history")
    @classmethod
    def _keep_recent_exchanges(cls, value: list[Exchange] | None) -> list[Exchange] | None:
        if value is None:
            return None
        return value[-MAX_HISTORY_EXCHANGES:]
