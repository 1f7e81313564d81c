"""Application services."""

from chat_relay.application.services.connection_orchestrator import (
    ConnectionOrchestrator,
    ErrorMessages,
)
from chat_relay.application.services.session_sweeper import SessionSweeper, SweepResult

__all__ = ["ConnectionOrchestrator", "ErrorMessages", "SessionSweeper", "SweepResult"]
