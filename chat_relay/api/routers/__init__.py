"""API routers."""

from chat_relay.api.routers.health import router as health_router
from chat_relay.api.routers.websocket_gateway import router as websocket_router

__all__ = ["health_router", "websocket_router"]
