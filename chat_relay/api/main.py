"""
Local chat relay server.

Local development server: wires the worker context, mounts the health and
WebSocket routers, and runs the expiry sweeper in the background.

Dependencies: fastapi, uvicorn, chat_relay.api.routers, chat_relay.dependencies
System role: Local gateway entry point
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_relay import __version__
from chat_relay.api.routers import health_router, websocket_router
from chat_relay.api.routers.websocket_gateway import LocalConnectionRegistry
from chat_relay.application.services import SessionSweeper
from chat_relay.configs import Settings, get_settings
from chat_relay.dependencies import build_worker_context
from chat_relay.observability import configure_logging
from chat_relay.observability.middleware import CorrelationMiddleware

logger = logging.getLogger(__name__)


async def run_sweeper(sweeper: SessionSweeper, interval_seconds: float) -> None:
    """Run the expiry sweep every interval until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        await sweeper.run()


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the local gateway application.

    Args:
        settings: Application settings (defaults to the cached instance)

    Returns:
        FastAPI: App serving /api/v1/health and the /ws endpoint
    """
    resolved = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the worker context on startup; stop the sweeper on shutdown."""
        worker = build_worker_context(resolved)
        app.state.worker = worker
        app.state.connections = LocalConnectionRegistry()

        sweep_task = asyncio.create_task(
            run_sweeper(worker.sweeper, resolved.session_store.sweep_interval_seconds)
        )
        logger.info(
            "%s:lifespan - Local gateway ready",
            __name__,
            extra={"sweep_interval_s": resolved.session_store.sweep_interval_seconds},
        )

        yield

        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
        logger.info("%s:lifespan - Local gateway stopped", __name__)

    app = FastAPI(
        title="Chat Relay",
        description="Multi-tenant WebSocket chat relay (local gateway)",
        version=__version__,
        debug=resolved.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationMiddleware)

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(websocket_router)

    return app


def main() -> None:
    """Run the local server with uvicorn."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        service_name=settings.service_name,
    )
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
