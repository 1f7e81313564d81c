"""
API Gateway WebSocket event parsing utilities for Lambda.
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from chat_relay.core.exceptions import ValidationError
from chat_relay.models.events import TransportEvent

logger = logging.getLogger(__name__)


def parse_websocket_event(raw: dict[str, Any]) -> TransportEvent:
    """
    Parse an API Gateway WebSocket proxy event.

    API Gateway sends events with this structure:
    {
        "requestContext": {
            "routeKey": "$connect",
            "connectionId": "abc=",
            "domainName": "xyz.execute-api.us-east-1.amazonaws.com",
            "stage": "prod",
            "requestId": "req-1"
        },
        "queryStringParameters": {"company": "vanguard"},
        "headers": {"X-Company-Id": "vanguard"},
        "body": "{\"text\": \"hello\"}"
    }

    Raises:
        ValidationError: Missing request context, route key or connection id
    """
    if not isinstance(raw, dict):
        raise ValidationError("Event must be an object", field="event")

    request_context = raw.get("requestContext")
    if not isinstance(request_context, dict):
        raise ValidationError("Missing requestContext", field="requestContext")

    route_key = request_context.get("routeKey")
    connection_id = request_context.get("connectionId")
    if not route_key or not connection_id:
        raise ValidationError(
            "Missing routeKey or connectionId",
            field="requestContext",
            details={"route_key": route_key},
        )

    body = raw.get("body")
    if body is not None and not isinstance(body, str):
        raise ValidationError("Body must be a string", field="body")

    try:
        event = TransportEvent(
            route_key=route_key,
            connection_id=connection_id,
            request_id=request_context.get("requestId"),
            domain_name=request_context.get("domainName"),
            stage=request_context.get("stage"),
            query_params=raw.get("queryStringParameters") or {},
            # Header names are case-insensitive
            headers={str(k).lower(): v for k, v in (raw.get("headers") or {}).items()},
            body=body,
        )
    except PydanticValidationError as e:
        logger.error("%s:parse_websocket_event - ValidationError: %s", __name__, e)
        raise ValidationError("Invalid WebSocket event", details={"errors": e.error_count()}) from e

    logger.info(
        "%s:parse_websocket_event - Parsed event",
        __name__,
        extra={"route_key": event.route_key, "connection_id": event.connection_id},
    )
    return event
