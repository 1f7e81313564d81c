"""
HTTP request tracing for the local gateway.

Binds X-Correlation-ID (or a generated id) for the request, logs method,
path, status and latency, and echoes the id back in the response.

Dependencies: fastapi, starlette, chat_relay.observability
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from chat_relay.observability.correlation import correlation_scope

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Tag each HTTP request with a correlation id and log its timing."""

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
            response: Response = await call_next(request)
            logger.info(
                "%s:dispatch - %s %s %d",
                __name__,
                request.method,
                request.url.path,
                response.status_code,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
