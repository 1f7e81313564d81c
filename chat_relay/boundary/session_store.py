"""
Session store contract.

Async CRUD over connection -> session rows with TTL-based expiry, plus the
epoch conversion helpers shared by implementations.

Dependencies: chat_relay.models.session
System role: Session Store Adapter interface
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from chat_relay.models.session import SessionRecord, SessionUpdate
from chat_relay.models.tenant import TenantConfiguration

SESSION_TTL_SECONDS = 3600

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_epoch(moment: datetime) -> Decimal:
    """
    Epoch seconds with microsecond precision.

    Computed without floats so that to_epoch(t + ttl) == to_epoch(t) + ttl
    holds exactly. Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return Decimal((moment - _EPOCH) // _MICROSECOND).scaleb(-6)


def from_epoch(value: Decimal | int | float) -> datetime:
    """Aware UTC datetime from epoch seconds."""
    microseconds = int((Decimal(str(value)) * 1_000_000).to_integral_value())
    return _EPOCH + microseconds * _MICROSECOND


class SessionStore(ABC):
    """Contract for persisting sessions keyed by (connection id, session id)."""

    @abstractmethod
    async def create_session(
        self,
        connection_id: str,
        company_id: str,
        company_config: TenantConfiguration,
    ) -> str:
        """
        Create the session for a new connection.

        Rows left by an earlier connect on the same connection id are
        removed first, so a connection never has two live sessions.

        Returns:
            str: Generated session identifier

        Raises:
            StoreError: Write failed
        """

    @abstractmethod
    async def get_active_session(self, connection_id: str) -> SessionRecord | None:
        """
        Return the most recently created session for a connection.

        Expired-but-unswept rows are returned as-is. Store failures are
        logged and reported as None.
        """

    @abstractmethod
    async def update_session(
        self,
        connection_id: str,
        session_id: str,
        update: SessionUpdate,
        expected_revision: int | None = None,
    ) -> SessionRecord:
        """
        Merge fields and refresh last-activity and expiry.

        Args:
            connection_id: Connection identifier
            session_id: Session identifier
            update: Fields to change
            expected_revision: Apply only if the stored revision matches

        Returns:
            SessionRecord: Record after the update

        Raises:
            SessionNotFoundError: No such session
            StoreError: Write failed or revision conflict
        """

    @abstractmethod
    async def delete_all_sessions(self, connection_id: str) -> int:
        """
        Delete every session row of a connection.

        Returns:
            int: Number of rows deleted (zero is valid)

        Raises:
            StoreError: Delete failed
        """

    @abstractmethod
    async def sweep_expired(self) -> int:
        """
        Delete rows whose expiry is strictly before now.

        Returns:
            int: Number of rows deleted

        Raises:
            StoreError: Scan or delete failed
        """
