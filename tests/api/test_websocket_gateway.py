"""
Test suite for the local WebSocket gateway.

Drives the full connect / message / disconnect flow through FastAPI's
TestClient with the in-memory store and the offline response client.

System role: Verification of the local transport
"""

import json
from unittest.mock import AsyncMock

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from chat_relay.api.main import create_app
from chat_relay.application.services import ErrorMessages
from chat_relay.configs.generative import GenerativeSettings
from chat_relay.configs.session_store import SessionStoreSettings
from chat_relay.configs.settings import Settings
from chat_relay.core.exceptions import StoreError
from chat_relay.core.generative.response_fallbacks import LOCAL_DEVELOPMENT_LABEL


@pytest.fixture
def client():
    """Provide a TestClient with the lifespan running."""
    settings = Settings(
        session_store=SessionStoreSettings(backend="memory"),
        generative=GenerativeSettings(api_key="dummy-key-for-local-dev"),
    )
    with TestClient(create_app(settings)) as test_client:
        yield test_client


class TestWebsocketGateway:
    """Test suite for WS /ws."""

    def test_should_answer_message_with_tenant_name(self, client) -> None:
        """Test a message gets a labeled local reply branded for the tenant."""
        with client.websocket_connect("/ws?company=vanguard") as websocket:
            # Act
            websocket.send_text(json.dumps({"text": "What funds do you offer?"}))
            reply = websocket.receive_json()

        # Assert
        assert reply["type"] == "response"
        assert reply["companyName"] == "Vanguard"
        assert reply["message"].startswith(LOCAL_DEVELOPMENT_LABEL)
        assert reply["timestamp"].endswith("Z")

    def test_unknown_tenant_should_get_generic_assistant(self, client) -> None:
        """Test unknown tenants are served by the generic bundle."""
        with client.websocket_connect("/ws?company=acme") as websocket:
            websocket.send_text(json.dumps({"text": "hello"}))
            reply = websocket.receive_json()

        assert reply["companyName"] == "Assistant"

    def test_invalid_message_should_push_error(self, client) -> None:
        """Test invalid payloads receive the generic error and the socket stays open."""
        with client.websocket_connect("/ws") as websocket:
            # Act
            websocket.send_text("not json")
            error = websocket.receive_json()
            websocket.send_text(json.dumps({"text": "still here?"}))
            reply = websocket.receive_json()

        # Assert
        assert error["type"] == "error"
        assert error["message"] == ErrorMessages.INVALID_MESSAGE
        assert reply["type"] == "response"

    def test_open_connection_should_hold_one_session(self, client) -> None:
        """Test an accepted socket has one session and one registered connection."""
        # Arrange
        store = client.app.state.worker.session_store

        with client.websocket_connect("/ws") as websocket:
            # Act
            websocket.send_text(json.dumps({"text": "hello"}))
            websocket.receive_json()

            # Assert
            assert len(store) == 1
            assert client.get("/api/v1/health").json()["active_connections"] == 1

    def test_failed_connect_should_close_socket(self, client) -> None:
        """Test a session creation failure rejects the connection."""
        # Arrange
        failing_store = AsyncMock()
        failing_store.create_session.side_effect = StoreError("down", operation="create")
        client.app.state.worker.orchestrator.session_store = failing_store

        # Act / Assert
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws"):
                pass
