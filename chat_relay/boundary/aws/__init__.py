"""AWS adapters: DynamoDB session store and API Gateway connection client."""

from chat_relay.boundary.aws.connection_client import (
    ApiGatewayConnectionClient,
    ConnectionClientFactory,
)
from chat_relay.boundary.aws.dynamodb_session_store import DynamoDBSessionStore

__all__ = ["ApiGatewayConnectionClient", "ConnectionClientFactory", "DynamoDBSessionStore"]
