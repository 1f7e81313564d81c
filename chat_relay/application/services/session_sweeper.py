"""
Expired session sweeper.

Batch cleanup of sessions whose expiry has passed, complementing the
store's native TTL deletion which may lag by hours.

Dependencies: chat_relay.boundary.session_store
System role: Expiry Sweeper
"""

import logging
from dataclasses import dataclass

from chat_relay.boundary.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    """Outcome of one sweep run."""

    success: bool
    deleted: int = 0
    error: str | None = None


class SessionSweeper:
    """Deletes expired sessions on demand."""

    def __init__(self, session_store: SessionStore) -> None:
        self.session_store = session_store

    async def run(self) -> SweepResult:
        """
        Delete every session whose expiry is before now.

        Returns:
            SweepResult: success flag and deleted row count
        """
        logger.info("%s:run - Starting expired session sweep", __name__)
        try:
            deleted = await self.session_store.sweep_expired()
        except Exception as e:
            logger.error(
                "%s:run - Sweep failed: %s: %s",
                __name__,
                type(e).__name__,
                e,
            )
            return SweepResult(success=False, error=str(e))

        logger.info("%s:run - Sweep complete", __name__, extra={"deleted": deleted})
        return SweepResult(success=True, deleted=deleted)
