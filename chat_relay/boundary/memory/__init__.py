"""In-memory adapters for local development and tests."""

from chat_relay.boundary.memory.memory_session_store import MemorySessionStore

__all__ = ["MemorySessionStore"]
