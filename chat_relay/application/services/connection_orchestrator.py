"""
Connection orchestrator.

Drives one transport event through the connect / message / disconnect
lifecycle: tenant resolution, session persistence, reply generation and
push delivery. Clients only ever see the two push shapes and a coarse
status code.

Dependencies: chat_relay.boundary, chat_relay.core.generative,
    chat_relay.core.security, chat_relay.core.tenants
System role: Connection Orchestrator
"""

import json
import logging
from collections.abc import Callable
from datetime import datetime

from chat_relay.boundary.connection_pusher import ConnectionPusher
from chat_relay.boundary.session_store import SessionStore, utc_now
from chat_relay.core.exceptions import TransportGoneError, ValidationError
from chat_relay.core.generative.response_client import ResponseClient
from chat_relay.core.security.input_validator import validate_message, validate_tenant_id
from chat_relay.core.tenants.registry import TenantRegistry
from chat_relay.models.events import MESSAGE_ROUTES, EventResult, RouteKey, TransportEvent
from chat_relay.models.messages import OutboundMessage
from chat_relay.models.session import MAX_HISTORY_EXCHANGES, Exchange, SessionUpdate
from chat_relay.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class ErrorMessages:
    """Client-facing error texts."""

    INVALID_MESSAGE = "Please provide a valid message."
    SESSION_NOT_FOUND = "Session not found. Please refresh and try again."
    SESSION_CONFIG = "Session configuration error. Please refresh and try again."
    PROCESSING = "Sorry, I encountered an error processing your message. Please try again."


class ConnectionOrchestrator:
    """Lifecycle handler for WebSocket connection events."""

    def __init__(
        self,
        session_store: SessionStore,
        response_client: ResponseClient,
        tenant_registry: TenantRegistry,
        default_company: str = "vanguard",
        max_history: int = MAX_HISTORY_EXCHANGES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize orchestrator with long-lived collaborators.

        Args:
            session_store: Session persistence adapter
            response_client: Generative reply client
            tenant_registry: Tenant configuration lookup
            default_company: Tenant used when the connection names none
            max_history: Exchanges retained per session
            clock: Source of the current UTC time
        """
        self.session_store = session_store
        self.response_client = response_client
        self.tenant_registry = tenant_registry
        self.default_company = default_company
        self.max_history = max_history
        self.clock = clock

    async def handle(self, event: TransportEvent, pusher: ConnectionPusher) -> EventResult:
        """
        Dispatch an event by route key.

        Args:
            event: Normalized transport event
            pusher: Delivery channel for the event's connection

        Returns:
            EventResult: 200, 400, 404 or 500
        """
        if event.route_key == RouteKey.CONNECT.value:
            return await self.handle_connect(event)
        if event.route_key == RouteKey.DISCONNECT.value:
            return await self.handle_disconnect(event)
        if event.route_key in MESSAGE_ROUTES:
            return await self.handle_message(event, pusher)

        log_with_context(
            logger,
            logging.WARNING,
            f"{__name__}:handle - Unknown route",
            route_key=event.route_key,
            connection_id=event.connection_id,
        )
        return EventResult(status_code=400)

    async def handle_connect(self, event: TransportEvent) -> EventResult:
        """Resolve the tenant and create the connection's session."""
        company_id = validate_tenant_id(event.tenant_hint(), self.default_company)
        config = self.tenant_registry.resolve(company_id)

        try:
            session_id = await self.session_store.create_session(
                event.connection_id, company_id, config
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:handle_connect - Session creation failed",
                e,
                event_type="connect",
                connection_id=event.connection_id,
                company_id=company_id,
            )
            return EventResult(status_code=500)

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:handle_connect - Connection established",
            connection_id=event.connection_id,
            session_id=session_id,
            company_id=company_id,
            company_name=config.name,
            registered_tenant=company_id in self.tenant_registry,
        )
        return EventResult(status_code=200)

    async def handle_disconnect(self, event: TransportEvent) -> EventResult:
        """Delete every session of the connection; always succeeds."""
        await self._cleanup(event.connection_id, event_type="disconnect")
        return EventResult(status_code=200)

    async def handle_message(self, event: TransportEvent, pusher: ConnectionPusher) -> EventResult:
        """Validate, generate a reply, persist the exchange and push it."""
        connection_id = event.connection_id

        try:
            inbound = validate_message(json.loads(event.body or ""))
        except (ValueError, ValidationError) as e:
            log_with_context(
                logger,
                logging.WARNING,
                f"{__name__}:handle_message - Invalid message",
                connection_id=connection_id,
                error_type=type(e).__name__,
                error_msg=str(e),
            )
            await self._push(pusher, connection_id, OutboundMessage.error(ErrorMessages.INVALID_MESSAGE))
            return EventResult(status_code=400)

        session = None
        try:
            session = await self.session_store.get_active_session(connection_id)
            if session is None or session.is_expired(self.clock()):
                log_with_context(
                    logger,
                    logging.WARNING,
                    f"{__name__}:handle_message - Session not found",
                    connection_id=connection_id,
                    expired_session_id=session.session_id if session else None,
                )
                await self._push(
                    pusher, connection_id, OutboundMessage.error(ErrorMessages.SESSION_NOT_FOUND)
                )
                return EventResult(status_code=404)

            if inbound.session_id and inbound.session_id != session.session_id:
                log_with_context(
                    logger,
                    logging.INFO,
                    f"{__name__}:handle_message - Client session id differs from active session",
                    connection_id=connection_id,
                    session_id=session.session_id,
                    client_session_id=inbound.session_id,
                )

            config = session.company_config
            if config is None:
                log_with_context(
                    logger,
                    logging.ERROR,
                    f"{__name__}:handle_message - Session has no tenant configuration",
                    connection_id=connection_id,
                    session_id=session.session_id,
                    company_id=session.company_id,
                )
                await self._push(
                    pusher, connection_id, OutboundMessage.error(ErrorMessages.SESSION_CONFIG)
                )
                return EventResult(status_code=500)

            logger.debug(
                "%s:handle_message - Processing message",
                __name__,
                extra={"connection_id": connection_id, "preview": inbound.text[:50]},
            )
            reply = await self.response_client.generate(
                inbound.text, session.conversation_history, config
            )

            history = [
                *session.conversation_history,
                Exchange(user=inbound.text, assistant=reply, timestamp=self.clock()),
            ][-self.max_history:]
            await self.session_store.update_session(
                connection_id,
                session.session_id,
                SessionUpdate(conversation_history=history),
            )

            await pusher.post(
                connection_id, OutboundMessage.response(reply, config.name).to_dict()
            )
        except TransportGoneError:
            await self._cleanup(connection_id, event_type="message")
            return EventResult(status_code=200)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:handle_message - Message processing failed",
                e,
                event_type="message",
                connection_id=connection_id,
                company_id=session.company_id if session else None,
            )
            await self._push(pusher, connection_id, OutboundMessage.error(ErrorMessages.PROCESSING))
            return EventResult(status_code=500)

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:handle_message - Response delivered",
            connection_id=connection_id,
            session_id=session.session_id,
            company_name=config.name,
            history_length=len(history),
        )
        return EventResult(status_code=200)

    async def _push(
        self,
        pusher: ConnectionPusher,
        connection_id: str,
        message: OutboundMessage,
    ) -> None:
        """
        Best-effort delivery of an error notice.

        A gone connection triggers cleanup; other delivery failures are
        logged since the caller is already on an error path.
        """
        try:
            await pusher.post(connection_id, message.to_dict())
        except TransportGoneError:
            await self._cleanup(connection_id, event_type="push")
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_push - Failed to deliver error notice",
                e,
                connection_id=connection_id,
            )

    async def _cleanup(self, connection_id: str, event_type: str) -> None:
        try:
            deleted = await self.session_store.delete_all_sessions(connection_id)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_cleanup - Session cleanup failed",
                e,
                event_type=event_type,
                connection_id=connection_id,
            )
            return

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:_cleanup - Connection sessions removed",
            event_type=event_type,
            connection_id=connection_id,
            deleted=deleted,
        )
