"""
DynamoDB session store.

Rows are keyed PK=CONNECTION#<connection_id>, SK=SESSION#<session_id>.
ExpiresAt holds epoch seconds and doubles as the table's native TTL
attribute; the sweeper deletes rows DynamoDB has not reclaimed yet.

Dependencies: boto3, botocore, fastapi.concurrency
System role: Session Store Adapter (production)
"""

import json
import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as PydanticValidationError

from chat_relay.boundary.session_store import (
    SESSION_TTL_SECONDS,
    SessionStore,
    from_epoch,
    to_epoch,
    utc_now,
)
from chat_relay.configs.session_store import SessionStoreSettings
from chat_relay.core.exceptions import SessionNotFoundError, StoreError
from chat_relay.models.session import SessionRecord, SessionUpdate
from chat_relay.models.tenant import TenantConfiguration

logger = logging.getLogger(__name__)

CONNECTION_PREFIX = "CONNECTION#"
SESSION_PREFIX = "SESSION#"


def connection_key(connection_id: str) -> str:
    """Partition key for a connection."""
    return f"{CONNECTION_PREFIX}{connection_id}"


def session_key(session_id: str) -> str:
    """Sort key for a session."""
    return f"{SESSION_PREFIX}{session_id}"


def to_dynamo(value: Any) -> Any:
    """Convert JSON-compatible data to DynamoDB types (floats become Decimal)."""
    return json.loads(json.dumps(value), parse_float=Decimal)


def from_dynamo(value: Any) -> Any:
    """Convert DynamoDB Decimals back to int or float."""
    if isinstance(value, list):
        return [from_dynamo(item) for item in value]
    if isinstance(value, dict):
        return {key: from_dynamo(item) for key, item in value.items()}
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def item_to_record(item: dict[str, Any]) -> SessionRecord:
    """
    Convert a DynamoDB item to a SessionRecord.

    Raises:
        pydantic.ValidationError: Item does not match the record shape
    """
    company_config = item.get("CompanyConfig")
    return SessionRecord(
        connection_id=item["ConnectionId"],
        session_id=item["SessionId"],
        company_id=item.get("CompanyId", ""),
        company_config=from_dynamo(company_config) if company_config else None,
        conversation_history=from_dynamo(item.get("ConversationHistory", [])),
        created_at=from_epoch(item["CreatedAt"]),
        last_activity=from_epoch(item["LastActivity"]),
        expires_at=from_epoch(item["ExpiresAt"]),
        revision=int(item.get("Revision", 0)),
    )


def _error_code(exc: Exception) -> str | None:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


class DynamoDBSessionStore(SessionStore):
    """Session store over a DynamoDB table (boto3 resource API)."""

    def __init__(
        self,
        table: Any,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize DynamoDB session store.

        Args:
            table: boto3 DynamoDB Table resource
            ttl_seconds: Session lifetime after last activity
            clock: Source of the current UTC time
        """
        self._table = table
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: SessionStoreSettings) -> "DynamoDBSessionStore":
        """
        Build a store from settings, creating the boto3 table resource once.

        Args:
            settings: Session store settings with table_name set

        Returns:
            DynamoDBSessionStore: Store bound to the configured table
        """
        resource = boto3.resource(
            "dynamodb",
            region_name=settings.region,
            endpoint_url=settings.endpoint_url,
            config=Config(retries={"max_attempts": settings.max_attempts, "mode": "standard"}),
        )
        return cls(resource.Table(settings.table_name), ttl_seconds=settings.ttl_seconds)

    # ──────────────────────────────────────────────────────────────
    # Async API
    # ──────────────────────────────────────────────────────────────

    async def create_session(
        self,
        connection_id: str,
        company_id: str,
        company_config: TenantConfiguration,
    ) -> str:
        return await run_in_threadpool(
            self._create_session_sync, connection_id, company_id, company_config
        )

    async def get_active_session(self, connection_id: str) -> SessionRecord | None:
        return await run_in_threadpool(self._get_active_session_sync, connection_id)

    async def update_session(
        self,
        connection_id: str,
        session_id: str,
        update: SessionUpdate,
        expected_revision: int | None = None,
    ) -> SessionRecord:
        return await run_in_threadpool(
            self._update_session_sync, connection_id, session_id, update, expected_revision
        )

    async def delete_all_sessions(self, connection_id: str) -> int:
        return await run_in_threadpool(self._delete_all_sessions_sync, connection_id)

    async def sweep_expired(self) -> int:
        return await run_in_threadpool(self._sweep_expired_sync)

    # ──────────────────────────────────────────────────────────────
    # Sync implementation (boto3 is blocking)
    # ──────────────────────────────────────────────────────────────

    def _query_connection_items(self, connection_id: str) -> list[dict[str, Any]]:
        """Fetch every row of a connection, following pagination."""
        items: list[dict[str, Any]] = []
        query_kwargs: dict[str, Any] = {
            "KeyConditionExpression": Key("PK").eq(connection_key(connection_id)),
        }
        while True:
            response = self._table.query(**query_kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            query_kwargs["ExclusiveStartKey"] = last_key

    def _delete_items(self, items: list[dict[str, Any]]) -> int:
        with self._table.batch_writer() as batch:
            for item in items:
                batch.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})
        return len(items)

    def _create_session_sync(
        self,
        connection_id: str,
        company_id: str,
        company_config: TenantConfiguration,
    ) -> str:
        session_id = str(uuid.uuid4())
        now = self._clock()

        item = {
            "PK": connection_key(connection_id),
            "SK": session_key(session_id),
            "ConnectionId": connection_id,
            "SessionId": session_id,
            "CompanyId": company_id,
            "CompanyConfig": to_dynamo(company_config.model_dump(mode="json")),
            "ConversationHistory": [],
            "CreatedAt": to_epoch(now),
            "LastActivity": to_epoch(now),
            "ExpiresAt": to_epoch(now + self._ttl),
            "Revision": 0,
        }

        try:
            stale = self._query_connection_items(connection_id)
            if stale:
                logger.warning(
                    "%s:create_session - Replacing existing session rows",
                    __name__,
                    extra={"connection_id": connection_id, "stale_count": len(stale)},
                )
                self._delete_items(stale)

            self._table.put_item(
                Item=item,
                ConditionExpression=Attr("SK").not_exists(),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "%s:create_session - %s: %s",
                __name__,
                type(e).__name__,
                e,
                extra={"connection_id": connection_id},
            )
            raise StoreError(
                f"Failed to create session: {e}",
                operation="create",
                details={"connection_id": connection_id, "code": _error_code(e)},
            ) from e

        logger.info(
            "%s:create_session - Session created",
            __name__,
            extra={"connection_id": connection_id, "session_id": session_id, "company_id": company_id},
        )
        return session_id

    def _get_active_session_sync(self, connection_id: str) -> SessionRecord | None:
        try:
            items = self._query_connection_items(connection_id)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "%s:get_active_session - %s: %s",
                __name__,
                type(e).__name__,
                e,
                extra={"connection_id": connection_id},
            )
            return None

        if not items:
            logger.warning(
                "%s:get_active_session - No session found for connection",
                __name__,
                extra={"connection_id": connection_id},
            )
            return None

        latest = max(items, key=lambda item: (item.get("CreatedAt", 0), item["SK"]))
        try:
            record = item_to_record(latest)
        except (KeyError, PydanticValidationError) as e:
            logger.error(
                "%s:get_active_session - Unreadable session row: %s",
                __name__,
                type(e).__name__,
                extra={"connection_id": connection_id, "sk": latest.get("SK")},
            )
            return None

        logger.debug(
            "%s:get_active_session - Session found",
            __name__,
            extra={
                "connection_id": connection_id,
                "session_id": record.session_id,
                "row_count": len(items),
            },
        )
        return record

    def _update_session_sync(
        self,
        connection_id: str,
        session_id: str,
        update: SessionUpdate,
        expected_revision: int | None,
    ) -> SessionRecord:
        now = self._clock()
        assignments = [
            "LastActivity = :last_activity",
            "ExpiresAt = :expires_at",
            "Revision = if_not_exists(Revision, :zero) + :one",
        ]
        values: dict[str, Any] = {
            ":last_activity": to_epoch(now),
            ":expires_at": to_epoch(now + self._ttl),
            ":zero": 0,
            ":one": 1,
        }
        if update.conversation_history is not None:
            assignments.append("ConversationHistory = :history")
            values[":history"] = to_dynamo(
                [exchange.model_dump(mode="json") for exchange in update.conversation_history]
            )
        if update.company_config is not None:
            assignments.append("CompanyConfig = :company_config")
            values[":company_config"] = to_dynamo(update.company_config.model_dump(mode="json"))

        condition = Attr("PK").exists()
        if expected_revision is not None:
            condition = condition & Attr("Revision").eq(expected_revision)

        try:
            response = self._table.update_item(
                Key={"PK": connection_key(connection_id), "SK": session_key(session_id)},
                UpdateExpression="SET " + ", ".join(assignments),
                ExpressionAttributeValues=values,
                ConditionExpression=condition,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                if expected_revision is None:
                    raise SessionNotFoundError(connection_id, session_id) from e
                raise StoreError(
                    "Session revision conflict",
                    operation="update",
                    details={
                        "connection_id": connection_id,
                        "session_id": session_id,
                        "expected_revision": expected_revision,
                    },
                ) from e
            logger.error(
                "%s:update_session - ClientError: %s",
                __name__,
                e,
                extra={"connection_id": connection_id, "session_id": session_id},
            )
            raise StoreError(
                f"Failed to update session: {e}",
                operation="update",
                details={"connection_id": connection_id, "session_id": session_id},
            ) from e
        except BotoCoreError as e:
            logger.error(
                "%s:update_session - %s: %s",
                __name__,
                type(e).__name__,
                e,
                extra={"connection_id": connection_id, "session_id": session_id},
            )
            raise StoreError(
                f"Failed to update session: {e}",
                operation="update",
                details={"connection_id": connection_id, "session_id": session_id},
            ) from e

        logger.debug(
            "%s:update_session - Session updated",
            __name__,
            extra={"connection_id": connection_id, "session_id": session_id},
        )
        return item_to_record(response["Attributes"])

    def _delete_all_sessions_sync(self, connection_id: str) -> int:
        try:
            deleted = self._delete_items(self._query_connection_items(connection_id))
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "%s:delete_all_sessions - %s: %s",
                __name__,
                type(e).__name__,
                e,
                extra={"connection_id": connection_id},
            )
            raise StoreError(
                f"Failed to delete sessions: {e}",
                operation="delete",
                details={"connection_id": connection_id},
            ) from e

        logger.info(
            "%s:delete_all_sessions - Connection removed",
            __name__,
            extra={"connection_id": connection_id, "sessions_deleted": deleted},
        )
        return deleted

    def _sweep_expired_sync(self) -> int:
        now = to_epoch(self._clock())
        scan_kwargs: dict[str, Any] = {
            "FilterExpression": Attr("ExpiresAt").lt(now),
            "ProjectionExpression": "PK, SK",
        }
        deleted = 0
        try:
            while True:
                response = self._table.scan(**scan_kwargs)
                deleted += self._delete_items(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            logger.error("%s:sweep_expired - %s: %s", __name__, type(e).__name__, e)
            raise StoreError(
                f"Failed to sweep expired sessions: {e}",
                operation="sweep",
                details={"deleted_before_failure": deleted},
            ) from e

        logger.info(
            "%s:sweep_expired - Expired sessions cleaned up",
            __name__,
            extra={"count": deleted},
        )
        return deleted
