"""
In-memory session store: local development and tests only.

No persistence between restarts and no sharing between workers.

Dependencies: chat_relay.boundary.session_store
System role: Session Store Adapter (local)
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta

from chat_relay.boundary.session_store import SESSION_TTL_SECONDS, SessionStore, utc_now
from chat_relay.core.exceptions import SessionNotFoundError, StoreError
from chat_relay.models.session import SessionRecord, SessionUpdate
from chat_relay.models.tenant import TenantConfiguration

logger = logging.getLogger(__name__)


class MemorySessionStore(SessionStore):
    """Session store backed by a dict keyed by (connection_id, session_id)."""

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._rows: dict[tuple[str, str], SessionRecord] = {}
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def __len__(self) -> int:
        return len(self._rows)

    def _connection_rows(self, connection_id: str) -> list[SessionRecord]:
        return [record for (cid, _), record in self._rows.items() if cid == connection_id]

    async def create_session(
        self,
        connection_id: str,
        company_id: str,
        company_config: TenantConfiguration,
    ) -> str:
        stale = self._connection_rows(connection_id)
        if stale:
            logger.warning(
                "%s:create_session - Replacing existing session rows",
                __name__,
                extra={"connection_id": connection_id, "stale_count": len(stale)},
            )
            for record in stale:
                del self._rows[(connection_id, record.session_id)]

        session_id = str(uuid.uuid4())
        now = self._clock()
        self._rows[(connection_id, session_id)] = SessionRecord(
            connection_id=connection_id,
            session_id=session_id,
            company_id=company_id,
            company_config=company_config,
            conversation_history=[],
            created_at=now,
            last_activity=now,
            expires_at=now + self._ttl,
        )
        return session_id

    async def get_active_session(self, connection_id: str) -> SessionRecord | None:
        rows = self._connection_rows(connection_id)
        if not rows:
            return None
        return max(rows, key=lambda record: (record.created_at, record.session_id))

    async def update_session(
        self,
        connection_id: str,
        session_id: str,
        update: SessionUpdate,
        expected_revision: int | None = None,
    ) -> SessionRecord:
        current = self._rows.get((connection_id, session_id))
        if current is None:
            raise SessionNotFoundError(connection_id, session_id)
        if expected_revision is not None and current.revision != expected_revision:
            raise StoreError(
                "Session revision conflict",
                operation="update",
                details={"connection_id": connection_id, "session_id": session_id},
            )

        now = self._clock()
        changes = update.model_dump(exclude_none=True)
        updated = current.model_copy(
            update={
                **{field: getattr(update, field) for field in changes},
                "last_activity": now,
                "expires_at": now + self._ttl,
                "revision": current.revision + 1,
            }
        )
        self._rows[(connection_id, session_id)] = updated
        return updated

    async def delete_all_sessions(self, connection_id: str) -> int:
        rows = self._connection_rows(connection_id)
        for record in rows:
            del self._rows[(connection_id, record.session_id)]
        return len(rows)

    async def sweep_expired(self) -> int:
        now = self._clock()
        expired = [key for key, record in self._rows.items() if record.expires_at < now]
        for key in expired:
            del self._rows[key]
        logger.info(
            "%s:sweep_expired - Expired sessions cleaned up",
            __name__,
            extra={"count": len(expired)},
        )
        return len(expired)
