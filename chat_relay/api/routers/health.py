"""
Health check API endpoints.

Routes: GET /health

Dependencies: fastapi
System role: Health check HTTP API
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from chat_relay import __version__


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str
    version: str
    active_connections: int


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Basic health check with the local connection count."""
    connections = getattr(request.app.state, "connections", None)
    return HealthResponse(
        status="healthy",
        message="Server Healthy",
        version=__version__,
        active_connections=len(connections) if connections is not None else 0,
    )
