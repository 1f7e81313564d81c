"""
Shared test fixtures and configuration for entire test suite.

Provides: tenant configs, a controllable clock, in-memory store, push mocks,
    settings/worker cache reset
Dependencies: pytest
System role: Test infrastructure and fixture management
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from chat_relay.boundary.memory import MemorySessionStore
from chat_relay.configs import get_settings
from chat_relay.core.tenants import BUILTIN_TENANTS, GENERIC_TENANT
from chat_relay.dependencies import get_worker_context
from chat_relay.models.session import Exchange
from chat_relay.models.tenant import TenantConfiguration


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def reset_caches():
    """Clear cached settings and worker context around every test."""
    get_settings.cache_clear()
    get_worker_context.cache_clear()
    yield
    get_settings.cache_clear()
    get_worker_context.cache_clear()


@pytest.fixture
def vanguard_config() -> TenantConfiguration:
    """Provide the built-in Vanguard tenant configuration."""
    return BUILTIN_TENANTS["vanguard"]


@pytest.fixture
def generic_config() -> TenantConfiguration:
    """Provide the generic fallback tenant configuration."""
    return GENERIC_TENANT


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> MemorySessionStore:
    """Provide an in-memory session store driven by the fake clock."""
    return MemorySessionStore(ttl_seconds=3600, clock=clock)


@pytest.fixture
def pusher() -> AsyncMock:
    """Provide a mock connection pusher."""
    return AsyncMock()


def make_history(count: int) -> list[Exchange]:
    """Build `count` numbered exchanges, oldest first."""
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return [
        Exchange(user=f"question {i}", assistant=f"answer {i}", timestamp=base + timedelta(minutes=i))
        for i in range(count)
    ]


@pytest.fixture
def history_factory():
    """Provide the make_history builder."""
    return make_history
