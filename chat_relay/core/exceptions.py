"""
Exception hierarchy for the chat relay.

Errors raised by validation, the session store, the completion client and
the push transport. Each carries a details dict that the logging helpers
attach to the failure record.

Dependencies: None (pure domain layer)
System role: Shared error types for every relay layer
"""

from typing import Any


class ChatRelayException(Exception):
    """Base exception for all chat relay errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(ChatRelayException):
    """Raised when inbound payload or identifier validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class SessionNotFoundError(ChatRelayException):
    """Raised when a connection has no session row."""

    def __init__(
        self,
        connection_id: str,
        session_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize session not found error.

        Args:
            connection_id: Connection that has no session
            session_id: Session ID that was addressed, if any
            details: Additional context
        """
        details = details or {}
        details["connection_id"] = connection_id
        if session_id:
            details["session_id"] = session_id
        super().__init__(f"Session not found for connection: {connection_id}", details)


class ConfigurationError(ChatRelayException):
    """Raised when a session or the worker lacks usable configuration."""

    pass


class ExternalServiceError(ChatRelayException):
    """Raised when a generative API attempt fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize external service error.

        Args:
            message: Error message
            status_code: HTTP status returned by the API, if any
            retryable: Whether another attempt may succeed
            details: Additional context
        """
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message, details)


class StoreError(ChatRelayException):
    """Raised when a session store operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize store error.

        Args:
            message: Error message
            operation: Operation that failed (create, update, delete, sweep)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class TransportError(ChatRelayException):
    """Raised when pushing a message to a connection fails."""

    pass


class TransportGoneError(TransportError):
    """Raised when the target connection no longer exists."""

    def __init__(self, connection_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize transport gone error.

        Args:
            connection_id: Connection that the transport reports as gone
            details: Additional context
        """
        details = details or {}
        details["connection_id"] = connection_id
        self.connection_id = connection_id
        super().__init__(f"Connection gone: {connection_id}", details)
