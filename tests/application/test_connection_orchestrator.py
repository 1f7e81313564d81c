"""
Test suite for ConnectionOrchestrator.

Runs connect / message / disconnect flows against the in-memory session
store with a mocked response client and push channel.

System role: Verification of connection lifecycle orchestration
"""

import json
import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from chat_relay.application.services import ConnectionOrchestrator, ErrorMessages
from chat_relay.core.exceptions import StoreError, TransportGoneError
from chat_relay.core.generative import ResponseClient
from chat_relay.core.tenants import GENERIC_TENANT, TenantRegistry
from chat_relay.models.events import TransportEvent
from chat_relay.models.session import SessionRecord


def event(route_key: str, connection_id: str = "conn-1", **kwargs) -> TransportEvent:
    return TransportEvent(route_key=route_key, connection_id=connection_id, **kwargs)


def message(text, connection_id: str = "conn-1", **extra) -> TransportEvent:
    return event("$default", connection_id, body=json.dumps({"text": text, **extra}))


def pushed(pusher: AsyncMock) -> list[dict]:
    return [c.args[1] for c in pusher.post.await_args_list]


@pytest.fixture
def response_client() -> AsyncMock:
    """Provide a mock response client returning a fixed reply."""
    client = AsyncMock(spec=ResponseClient)
    client.generate.return_value = "Vanguard keeps costs low."
    return client


@pytest.fixture
def orchestrator(memory_store, response_client, clock) -> ConnectionOrchestrator:
    """Provide an orchestrator over the in-memory store sharing its clock."""
    return ConnectionOrchestrator(
        session_store=memory_store,
        response_client=response_client,
        tenant_registry=TenantRegistry(),
        default_company="vanguard",
        clock=clock,
    )


class TestConnect:
    """Test suite for $connect handling."""

    @pytest.mark.asyncio
    async def test_should_create_session_for_query_tenant(
        self, orchestrator, memory_store, pusher
    ) -> None:
        """Test ?company=vanguard seeds the session with the Vanguard bundle."""
        # Act
        result = await orchestrator.handle(
            event("$connect", query_params={"company": "Vanguard"}), pusher
        )

        # Assert
        assert result.status_code == 200
        session = await memory_store.get_active_session("conn-1")
        assert session.company_id == "vanguard"
        assert session.company_config.name == "Vanguard"
        assert session.conversation_history == []
        pusher.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_should_read_tenant_header(self, orchestrator, memory_store, pusher) -> None:
        """Test the x-company-id header is used when no query param is sent."""
        # Act
        await orchestrator.handle(event("$connect", headers={"x-company-id": "acme"}), pusher)

        # Assert
        session = await memory_store.get_active_session("conn-1")
        assert session.company_id == "acme"
        assert session.company_config == GENERIC_TENANT

    @pytest.mark.asyncio
    async def test_should_log_whether_tenant_is_registered(self, orchestrator, pusher, caplog) -> None:
        """Test unknown tenants are flagged on the connect log record."""
        # Act
        with caplog.at_level(logging.INFO, logger="chat_relay.application.services.connection_orchestrator"):
            await orchestrator.handle(event("$connect", query_params={"company": "acme"}), pusher)
            await orchestrator.handle(
                event("$connect", connection_id="conn-2", query_params={"company": "vanguard"}),
                pusher,
            )

        # Assert
        flags = [
            r.registered_tenant for r in caplog.records if hasattr(r, "registered_tenant")
        ]
        assert flags == [False, True]

    @pytest.mark.asyncio
    async def test_should_use_default_tenant_without_hint(
        self, orchestrator, memory_store, pusher
    ) -> None:
        """Test connections without a tenant get the default company."""
        # Act
        await orchestrator.handle(event("$connect"), pusher)

        # Assert
        assert (await memory_store.get_active_session("conn-1")).company_id == "vanguard"

    @pytest.mark.asyncio
    async def test_should_return_500_when_store_fails(self, response_client, pusher) -> None:
        """Test a failed session write rejects the connection."""
        # Arrange
        store = AsyncMock()
        store.create_session.side_effect = StoreError("down", operation="create")
        orchestrator = ConnectionOrchestrator(store, response_client, TenantRegistry())

        # Act
        result = await orchestrator.handle(event("$connect"), pusher)

        # Assert
        assert result.status_code == 500


class TestMessage:
    """Test suite for message handling."""

    @pytest.mark.asyncio
    async def test_should_push_reply_and_record_exchange(
        self, orchestrator, memory_store, response_client, pusher
    ) -> None:
        """Test a valid message is answered and appended to history."""
        # Arrange
        await orchestrator.handle(event("$connect", query_params={"company": "vanguard"}), pusher)

        # Act
        result = await orchestrator.handle(message("What are Vanguard's fees?"), pusher)

        # Assert
        assert result.status_code == 200
        response_client.generate.assert_awaited_once()
        args = response_client.generate.await_args.args
        assert args[0] == "What are Vanguard's fees?"
        assert args[1] == []
        assert args[2].name == "Vanguard"

        [payload] = pushed(pusher)
        assert payload["type"] == "response"
        assert payload["message"] == "Vanguard keeps costs low."
        assert payload["companyName"] == "Vanguard"
        assert payload["timestamp"].endswith("Z")

        session = await memory_store.get_active_session("conn-1")
        assert len(session.conversation_history) == 1
        assert session.conversation_history[0].user == "What are Vanguard's fees?"
        assert session.conversation_history[0].assistant == "Vanguard keeps costs low."

    @pytest.mark.asyncio
    async def test_sendmessage_route_should_be_handled(self, orchestrator, pusher) -> None:
        """Test the sendMessage route behaves like $default."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)

        # Act
        result = await orchestrator.handle(
            event("sendMessage", body=json.dumps({"text": "hi"})), pusher
        )

        # Assert
        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_should_keep_last_eight_exchanges(
        self, orchestrator, memory_store, response_client, pusher
    ) -> None:
        """Test nine messages leave exchanges 2..9 in history."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)

        # Act
        for i in range(1, 10):
            await orchestrator.handle(message(f"question {i}"), pusher)

        # Assert
        history = (await memory_store.get_active_session("conn-1")).conversation_history
        assert len(history) == 8
        assert history[0].user == "question 2"
        assert history[-1].user == "question 9"
        # The client is handed the stored history, the newest message excluded
        assert len(response_client.generate.await_args.args[1]) == 8

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            json.dumps({"text": ""}),
            json.dumps({"text": "x" * 501}),
            json.dumps({"text": "<script>alert(1)</script>"}),
            json.dumps(["text"]),
            None,
        ],
    )
    async def test_invalid_message_should_return_400(
        self, orchestrator, memory_store, response_client, pusher, body
    ) -> None:
        """Test invalid payloads push the generic error without touching the API."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)

        # Act
        result = await orchestrator.handle(event("$default", body=body), pusher)

        # Assert
        assert result.status_code == 400
        [payload] = pushed(pusher)
        assert payload["type"] == "error"
        assert payload["message"] == ErrorMessages.INVALID_MESSAGE
        assert "companyName" not in payload
        response_client.generate.assert_not_awaited()
        assert (await memory_store.get_active_session("conn-1")).revision == 0

    @pytest.mark.asyncio
    async def test_missing_session_should_return_404(
        self, orchestrator, response_client, pusher
    ) -> None:
        """Test a message on a connection without session is rejected."""
        # Act
        result = await orchestrator.handle(message("hello", connection_id="ghost"), pusher)

        # Assert
        assert result.status_code == 404
        assert pushed(pusher)[0]["message"] == ErrorMessages.SESSION_NOT_FOUND
        response_client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_session_should_return_404(
        self, orchestrator, response_client, pusher, clock
    ) -> None:
        """Test an expired but not yet swept session is not acted on."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)
        clock.advance(hours=1, seconds=1)

        # Act
        result = await orchestrator.handle(message("hello"), pusher)

        # Assert
        assert result.status_code == 404
        assert pushed(pusher)[0]["message"] == ErrorMessages.SESSION_NOT_FOUND
        response_client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_session_at_expiry_should_still_be_answered(
        self, orchestrator, memory_store, pusher, clock
    ) -> None:
        """Test expiry is exclusive and the exchange is stamped with the clock."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)
        clock.advance(hours=1)

        # Act
        result = await orchestrator.handle(message("hello"), pusher)

        # Assert
        assert result.status_code == 200
        session = await memory_store.get_active_session("conn-1")
        assert session.conversation_history[0].timestamp == clock.now

    @pytest.mark.asyncio
    async def test_missing_config_should_return_500(self, response_client, pusher) -> None:
        """Test a session without a tenant snapshot is a configuration error."""
        # Arrange
        now = datetime.now(timezone.utc)
        store = AsyncMock()
        store.get_active_session.return_value = SessionRecord(
            connection_id="conn-1",
            session_id="s1",
            company_id="vanguard",
            company_config=None,
            created_at=now,
            last_activity=now,
            expires_at=now,
        )
        orchestrator = ConnectionOrchestrator(
            store, response_client, TenantRegistry(), clock=lambda: now
        )

        # Act
        result = await orchestrator.handle(message("hello"), pusher)

        # Assert
        assert result.status_code == 500
        assert pushed(pusher)[0]["message"] == ErrorMessages.SESSION_CONFIG
        response_client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_write_failure_should_return_500(
        self, orchestrator, memory_store, pusher
    ) -> None:
        """Test a failed history write pushes the processing error."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)
        memory_store.update_session = AsyncMock(side_effect=StoreError("down", operation="update"))

        # Act
        result = await orchestrator.handle(message("hello"), pusher)

        # Assert
        assert result.status_code == 500
        assert pushed(pusher)[-1] == {
            "type": "error",
            "message": ErrorMessages.PROCESSING,
            "timestamp": pushed(pusher)[-1]["timestamp"],
        }

    @pytest.mark.asyncio
    async def test_client_session_id_should_not_be_used_for_lookup(
        self, orchestrator, memory_store, pusher
    ) -> None:
        """Test a stale client sessionId does not redirect the message."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)

        # Act
        result = await orchestrator.handle(message("hello", sessionId="stale-id"), pusher)

        # Assert
        assert result.status_code == 200
        assert len((await memory_store.get_active_session("conn-1")).conversation_history) == 1

    @pytest.mark.asyncio
    async def test_gone_connection_should_clean_up(self, orchestrator, memory_store, pusher) -> None:
        """Test a vanished client triggers session removal."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)
        pusher.post.side_effect = TransportGoneError("conn-1")

        # Act
        result = await orchestrator.handle(message("hello"), pusher)

        # Assert
        assert result.status_code == 200
        assert await memory_store.get_active_session("conn-1") is None

    @pytest.mark.asyncio
    async def test_gone_connection_on_error_push_should_clean_up(
        self, orchestrator, memory_store, pusher
    ) -> None:
        """Test a vanished client during an error notice also cleans up."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)
        pusher.post.side_effect = TransportGoneError("conn-1")

        # Act
        result = await orchestrator.handle(message(""), pusher)

        # Assert
        assert result.status_code == 400
        assert await memory_store.get_active_session("conn-1") is None


class TestDisconnect:
    """Test suite for $disconnect handling."""

    @pytest.mark.asyncio
    async def test_should_remove_sessions(self, orchestrator, memory_store, pusher) -> None:
        """Test disconnect deletes every session of the connection."""
        # Arrange
        await orchestrator.handle(event("$connect"), pusher)

        # Act
        result = await orchestrator.handle(event("$disconnect"), pusher)

        # Assert
        assert result.status_code == 200
        assert await memory_store.get_active_session("conn-1") is None

    @pytest.mark.asyncio
    async def test_should_succeed_without_session(self, orchestrator, pusher) -> None:
        """Test disconnecting an unknown connection still succeeds."""
        result = await orchestrator.handle(event("$disconnect", connection_id="ghost"), pusher)

        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_should_succeed_when_store_fails(self, response_client, pusher) -> None:
        """Test cleanup failures are logged, never surfaced."""
        # Arrange
        store = AsyncMock()
        store.delete_all_sessions.side_effect = StoreError("down", operation="delete")
        orchestrator = ConnectionOrchestrator(store, response_client, TenantRegistry())

        # Act
        result = await orchestrator.handle(event("$disconnect"), pusher)

        # Assert
        assert result.status_code == 200


class TestUnknownRoute:
    """Test suite for unsupported route keys."""

    @pytest.mark.asyncio
    async def test_should_return_400(self, orchestrator, pusher) -> None:
        """Test unknown route keys are rejected."""
        result = await orchestrator.handle(event("$custom"), pusher)

        assert result.status_code == 400
