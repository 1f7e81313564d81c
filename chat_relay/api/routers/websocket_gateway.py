"""
Local WebSocket gateway.

Maps accept / receive / close on a plain WebSocket onto the connect /
message / disconnect events API Gateway would deliver, and pushes replies
through an in-process connection registry.

Routes: WS /ws?company=<tenant>

Dependencies: fastapi, chat_relay.application.services
System role: Local development transport
"""

import logging
import uuid
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from chat_relay.boundary.connection_pusher import ConnectionPusher
from chat_relay.core.exceptions import TransportGoneError
from chat_relay.models.events import RouteKey, TransportEvent
from chat_relay.observability.correlation import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


class LocalConnectionRegistry(ConnectionPusher):
    """Open WebSockets of this process keyed by connection id."""

    def __init__(self) -> None:
        self._sockets: dict[str, WebSocket] = {}

    def __len__(self) -> int:
        return len(self._sockets)

    def register(self, connection_id: str, websocket: WebSocket) -> None:
        self._sockets[connection_id] = websocket

    def unregister(self, connection_id: str) -> None:
        self._sockets.pop(connection_id, None)

    async def post(self, connection_id: str, payload: dict[str, Any]) -> None:
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            raise TransportGoneError(connection_id)
        try:
            await websocket.send_json(payload)
        except (WebSocketDisconnect, RuntimeError) as e:
            self.unregister(connection_id)
            raise TransportGoneError(connection_id) from e


def _event(
    websocket: WebSocket,
    route_key: RouteKey,
    connection_id: str,
    body: str | None = None,
) -> TransportEvent:
    request_id = set_correlation_id()
    return TransportEvent(
        route_key=route_key.value,
        connection_id=connection_id,
        request_id=request_id,
        query_params=dict(websocket.query_params),
        headers={k.lower(): v for k, v in websocket.headers.items()},
        body=body,
    )


@router.websocket("/ws")
async def websocket_gateway(websocket: WebSocket) -> None:
    """
    WebSocket chat endpoint.

    Client sends:
        {"text": "...", "sessionId": "..."}

    Server sends:
        {"type": "response", "message": "...", "timestamp": "...", "companyName": "..."}
        {"type": "error", "message": "...", "timestamp": "..."}

    Args:
        websocket: WebSocket connection
    """
    orchestrator = websocket.app.state.worker.orchestrator
    connections: LocalConnectionRegistry = websocket.app.state.connections
    connection_id = str(uuid.uuid4())

    try:
        result = await orchestrator.handle(
            _event(websocket, RouteKey.CONNECT, connection_id), connections
        )
    finally:
        clear_correlation_id()
    if result.status_code != 200:
        logger.warning(
            "%s:websocket_gateway - Connect rejected",
            __name__,
            extra={"connection_id": connection_id, "status_code": result.status_code},
        )
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    await websocket.accept()
    connections.register(connection_id, websocket)
    logger.info(
        "%s:websocket_gateway - Connection accepted",
        __name__,
        extra={"connection_id": connection_id, "client_host": str(websocket.client)},
    )

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                await orchestrator.handle(
                    _event(websocket, RouteKey.DEFAULT, connection_id, body=raw), connections
                )
            finally:
                clear_correlation_id()
    except WebSocketDisconnect:
        logger.info(
            "%s:websocket_gateway - Client disconnected",
            __name__,
            extra={"connection_id": connection_id},
        )
    finally:
        connections.unregister(connection_id)
        try:
            await orchestrator.handle(
                _event(websocket, RouteKey.DISCONNECT, connection_id), connections
            )
        finally:
            clear_correlation_id()
