"""
Dependency injection container.

Builds the long-lived collaborators of a worker (session store, response
client, tenant registry, push client factory) once and hands them to the
Lambda handlers and the local server.

Dependencies: chat_relay.configs, chat_relay.application, chat_relay.boundary
System role: DI container for service injection
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

from chat_relay.application.services import ConnectionOrchestrator, SessionSweeper
from chat_relay.boundary.aws import ConnectionClientFactory, DynamoDBSessionStore
from chat_relay.boundary.memory import MemorySessionStore
from chat_relay.boundary.session_store import SessionStore
from chat_relay.configs import Settings, get_settings
from chat_relay.core.exceptions import ConfigurationError
from chat_relay.core.generative import ResponseClient
from chat_relay.core.tenants import TenantRegistry

logger = logging.getLogger(__name__)


@dataclass
class WorkerContext:
    """Collaborators shared by every event a worker handles."""

    settings: Settings
    session_store: SessionStore
    response_client: ResponseClient
    tenant_registry: TenantRegistry
    connection_clients: ConnectionClientFactory
    orchestrator: ConnectionOrchestrator
    sweeper: SessionSweeper


def build_session_store(settings: Settings) -> SessionStore:
    """
    Select the session store backend.

    Raises:
        ConfigurationError: Unknown backend name
    """
    backend = settings.session_store.backend.lower()
    if backend == "memory":
        logger.warning("%s:build_session_store - Using in-memory session store", __name__)
        return MemorySessionStore(ttl_seconds=settings.session_store.ttl_seconds)
    if backend == "dynamodb":
        if not settings.session_store.table_name:
            raise ConfigurationError("DYNAMODB_TABLE_NAME is not configured")
        return DynamoDBSessionStore.from_settings(settings.session_store)
    raise ConfigurationError(
        f"Unknown session store backend: {settings.session_store.backend}",
        details={"backend": settings.session_store.backend},
    )


def build_tenant_registry(settings: Settings) -> TenantRegistry:
    """Built-in tenants, extended by the registry file when configured."""
    if settings.transport.tenants_registry_file:
        return TenantRegistry.from_file(settings.transport.tenants_registry_file)
    return TenantRegistry()


def build_worker_context(settings: Settings | None = None) -> WorkerContext:
    """
    Assemble a worker context from settings.

    Args:
        settings: Application settings (defaults to the cached instance)

    Returns:
        WorkerContext: Wired collaborators
    """
    settings = settings or get_settings()
    session_store = build_session_store(settings)
    response_client = ResponseClient.from_settings(settings.generative)
    tenant_registry = build_tenant_registry(settings)

    orchestrator = ConnectionOrchestrator(
        session_store=session_store,
        response_client=response_client,
        tenant_registry=tenant_registry,
        default_company=settings.transport.default_company,
        max_history=settings.session_store.max_history,
    )

    logger.info(
        "%s:build_worker_context - Worker context ready",
        __name__,
        extra={
            "backend": settings.session_store.backend,
            "default_company": settings.transport.default_company,
            "offline": response_client.offline,
        },
    )
    return WorkerContext(
        settings=settings,
        session_store=session_store,
        response_client=response_client,
        tenant_registry=tenant_registry,
        connection_clients=ConnectionClientFactory(
            region=settings.session_store.region,
            endpoint_override=settings.transport.websocket_api_endpoint,
        ),
        orchestrator=orchestrator,
        sweeper=SessionSweeper(session_store),
    )


@lru_cache
def get_worker_context() -> WorkerContext:
    """
    Get the worker context singleton.

    Built on first use and reused across warm Lambda invocations.
    """
    return build_worker_context()
