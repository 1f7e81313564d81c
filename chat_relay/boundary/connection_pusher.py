"""
Connection push contract.

Dependencies: None
System role: Outbound transport interface used by the orchestrator
"""

from abc import ABC, abstractmethod
from typing import Any


class ConnectionPusher(ABC):
    """Delivers JSON messages to an open connection."""

    @abstractmethod
    async def post(self, connection_id: str, payload: dict[str, Any]) -> None:
        """
        Send one message to a connection.

        Raises:
            TransportGoneError: The transport confirms the connection no longer exists
            TransportError: Any other delivery failure
        """
