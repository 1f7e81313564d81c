"""
API Gateway WebSocket management client.

Pushes messages to connected clients through the apigatewaymanagementapi
PostToConnection call.

Dependencies: boto3, botocore, fastapi.concurrency
System role: Transport push for the Lambda deployment
"""

import json
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from chat_relay.boundary.connection_pusher import ConnectionPusher
from chat_relay.core.exceptions import ConfigurationError, TransportError, TransportGoneError

logger = logging.getLogger(__name__)

GONE_ERROR_CODES = frozenset({"GoneException", "410"})


def is_gone_error(exc: ClientError) -> bool:
    """Return True when PostToConnection reports a stale connection."""
    error = exc.response.get("Error", {})
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return error.get("Code") in GONE_ERROR_CODES or status == 410


class ApiGatewayConnectionClient(ConnectionPusher):
    """Pusher bound to one WebSocket API management endpoint."""

    def __init__(self, endpoint_url: str, client: Any | None = None, region: str | None = None) -> None:
        """
        Initialize management API client.

        Args:
            endpoint_url: https://<api-id>.execute-api.<region>.amazonaws.com/<stage>
            client: Preconfigured boto3 apigatewaymanagementapi client
            region: AWS region for a new client
        """
        self._endpoint_url = endpoint_url
        self._client = client or boto3.client(
            "apigatewaymanagementapi",
            endpoint_url=endpoint_url,
            region_name=region,
            config=Config(retries={"max_attempts": 2, "mode": "standard"}),
        )

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    async def post(self, connection_id: str, payload: dict[str, Any]) -> None:
        await run_in_threadpool(self._post_sync, connection_id, payload)

    def _post_sync(self, connection_id: str, payload: dict[str, Any]) -> None:
        try:
            self._client.post_to_connection(
                ConnectionId=connection_id,
                Data=json.dumps(payload).encode("utf-8"),
            )
        except ClientError as e:
            if is_gone_error(e):
                logger.info(
                    "%s:post - Connection gone",
                    __name__,
                    extra={"connection_id": connection_id},
                )
                raise TransportGoneError(connection_id) from e
            logger.error(
                "%s:post - ClientError: %s",
                __name__,
                e,
                extra={"connection_id": connection_id},
            )
            raise TransportError(
                f"Failed to post to connection: {e}",
                details={"connection_id": connection_id},
            ) from e
        except BotoCoreError as e:
            logger.error(
                "%s:post - %s: %s",
                __name__,
                type(e).__name__,
                e,
                extra={"connection_id": connection_id},
            )
            raise TransportError(
                f"Failed to post to connection: {e}",
                details={"connection_id": connection_id},
            ) from e


class ConnectionClientFactory:
    """Caches one management client per endpoint for the worker lifetime."""

    def __init__(self, region: str | None = None, endpoint_override: str | None = None) -> None:
        """
        Initialize factory.

        Args:
            region: AWS region for new clients
            endpoint_override: Endpoint used instead of the event-derived one
        """
        self._region = region
        self._endpoint_override = endpoint_override
        self._clients: dict[str, ApiGatewayConnectionClient] = {}

    def for_endpoint(self, endpoint_url: str | None) -> ApiGatewayConnectionClient:
        """
        Get the client for an endpoint, creating it on first use.

        Raises:
            ConfigurationError: No endpoint from the event or settings
        """
        endpoint = self._endpoint_override or endpoint_url
        if not endpoint:
            raise ConfigurationError("WebSocket management endpoint is not configured")
        if endpoint not in self._clients:
            self._clients[endpoint] = ApiGatewayConnectionClient(endpoint, region=self._region)
        return self._clients[endpoint]
