"""Access log middleware emitting one structured record per request."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger("app.access")


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and latency for every request.

    A fresh ``request_id`` is bound into structlog's contextvars for the
    duration of the request, so any log line emitted by a handler carries it.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = uuid.uuid4().hex
        client = request.client.host if request.client else None

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            fields = {
                "method": request.method,
                "path": request.url.path,
                "query": request.url.query or None,
                "client": client,
                "user_agent": request.headers.get("user-agent"),
            }
            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "request_failed",
                    status_code=500,
                    duration_ms=_elapsed_ms(start),
                    **fields,
                )
                raise

            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(start),
                **fields,
            )
            return response


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
