"""
Transport event schemas.

Normalized connection lifecycle events, independent of whether they
arrive from API Gateway or the local WebSocket gateway.

Dependencies: pydantic
System role: Transport event contracts
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class RouteKey(str, Enum):
    """WebSocket route keys."""

    CONNECT = "$connect"
    DISCONNECT = "$disconnect"
    DEFAULT = "$default"
    SEND_MESSAGE = "sendMessage"


MESSAGE_ROUTES = frozenset({RouteKey.DEFAULT.value, RouteKey.SEND_MESSAGE.value})


class TransportEvent(BaseModel):
    """
    One connection lifecycle event.

    Attributes:
        route_key: Raw route key (unknown values are kept for rejection)
        connection_id: Transport-assigned connection identifier
        request_id: Per-invocation identifier used as correlation id
        domain_name: API Gateway domain (management endpoint host)
        stage: Deployment stage
        query_params: Query string parameters sent on connect
        headers: Request headers, keys lower-cased
        body: Raw message body
    """

    route_key: str
    connection_id: str = Field(min_length=1)
    request_id: str | None = None
    domain_name: str | None = None
    stage: str | None = None
    query_params: dict[str, str] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None

    @property
    def management_endpoint(self) -> str | None:
        """Management API endpoint derived from domain and stage."""
        if not self.domain_name or not self.stage:
            return None
        return f"https://{self.domain_name}/{self.stage}"

    def tenant_hint(self) -> str | None:
        """Tenant identifier from the `company` query parameter or `x-company-id` header."""
        return self.query_params.get("company") or self.headers.get("x-company-id")


class EventResult(BaseModel):
    """Coarse outcome reported back to the transport."""

    status_code: int

    def to_lambda_response(self) -> dict[str, Any]:
        """Render as an API Gateway integration response."""
        return {"statusCode": self.status_code}
