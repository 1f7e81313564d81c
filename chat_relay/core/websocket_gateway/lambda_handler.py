"""
Lambda handler for API Gateway WebSocket events.

Routes $connect, $disconnect, $default and sendMessage events through the
connection orchestrator and returns the coarse status code to API Gateway.

Environment variables:
- PERPLEXITY_API_KEY: Completion API key (or PERPLEXITY_SECRET_ARN)
- DYNAMODB_TABLE_NAME: Session table
- WEBSOCKET_API_ENDPOINT: Optional management endpoint override
- DEFAULT_COMPANY: Tenant used when the connection names none
- LOG_LEVEL / LOG_FORMAT: Logging setup

Dependencies: chat_relay.dependencies, chat_relay.core.websocket_gateway.lambda_utils
System role: Lambda entry point for the WebSocket API
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any

from dotenv import load_dotenv

from chat_relay.configs import get_settings
from chat_relay.core.exceptions import ConfigurationError, ValidationError
from chat_relay.core.websocket_gateway.lambda_utils import (
    configure_secrets,
    parse_websocket_event,
    validate_environment,
)
from chat_relay.dependencies import get_worker_context
from chat_relay.models.events import RouteKey, TransportEvent
from chat_relay.observability import configure_logging, correlation_scope

logger = logging.getLogger(__name__)


@lru_cache
def _bootstrap() -> None:
    """Cold-start setup: .env and secrets into the environment, then logging."""
    load_dotenv()
    configure_secrets()
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        service_name=settings.service_name,
    )


def _request_id(event: Any) -> str | None:
    if isinstance(event, dict):
        return (event.get("requestContext") or {}).get("requestId")
    return None


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Lambda handler for WebSocket route events.

    Args:
        event: API Gateway WebSocket proxy event
        context: Lambda context object

    Returns:
        Dict with statusCode (200, 400, 404 or 500)
    """
    _bootstrap()

    with correlation_scope(_request_id(event)):
        try:
            transport_event = parse_websocket_event(event)
        except ValidationError as e:
            logger.warning("%s:handler - ValidationError: %s", __name__, e)
            return {"statusCode": 400}

        if transport_event.route_key == RouteKey.DISCONNECT.value:
            return _handle_disconnect(transport_event)

        if validate_environment(get_settings()):
            return {"statusCode": 500}

        try:
            worker = get_worker_context()
            pusher = worker.connection_clients.for_endpoint(transport_event.management_endpoint)
        except ConfigurationError as e:
            logger.error("%s:handler - ConfigurationError: %s", __name__, e)
            return {"statusCode": 500}

        try:
            result = asyncio.run(worker.orchestrator.handle(transport_event, pusher))
        except Exception as e:
            logger.exception(
                "%s:handler - %s: %s",
                __name__,
                type(e).__name__,
                e,
                extra={
                    "route_key": transport_event.route_key,
                    "connection_id": transport_event.connection_id,
                },
            )
            return {"statusCode": 500}

        logger.info(
            "%s:handler - Event handled",
            __name__,
            extra={
                "route_key": transport_event.route_key,
                "connection_id": transport_event.connection_id,
                "status_code": result.status_code,
            },
        )
        return result.to_lambda_response()


def _handle_disconnect(transport_event: TransportEvent) -> dict[str, Any]:
    """
    Clean up a closed connection.

    API Gateway ignores the answer to $disconnect, so every outcome is
    reported as 200. Nothing is pushed and the completion key is not needed.
    """
    try:
        worker = get_worker_context()
        asyncio.run(worker.orchestrator.handle_disconnect(transport_event))
    except Exception as e:
        logger.error(
            "%s:_handle_disconnect - Cleanup skipped: %s: %s",
            __name__,
            type(e).__name__,
            e,
            extra={"connection_id": transport_event.connection_id},
        )
    return {"statusCode": 200}
