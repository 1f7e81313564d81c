import pytest
from fastapi.testclient import TestClient

from chat_relay.api.main import create_app
from chat_relay.configs.generative import GenerativeSettings
from chat_relay.configs.session_store import SessionStoreSettings
from chat_relay.configs.settings import Settings


@pytest.fixture
def client():
    settings = Settings(
        session_store=SessionStoreSettings(backend="memory"),
        generative=GenerativeSettings(api_key="dummy-key-for-local-dev"),
    )
    with TestClient(create_app(settings)) as test_client:
        yield test_client


def test_health_check(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "message": "Server Healthy",
        "version": "0.1.0",
        "active_connections": 0,
    }


def test_health_check_echoes_correlation_id(client):
    response = client.get("/api/v1/health", headers={"X-Correlation-ID": "corr-1"})
    assert response.headers["X-Correlation-ID"] == "corr-1"


def test_health_check_generates_correlation_id(client):
    response = client.get("/api/v1/health")
    assert response.headers["X-Correlation-ID"]
