"""Health check endpoint with database connectivity verification."""

import structlog
from fastapi import APIRouter, Response, status
from sqlalchemy import text

from app.dependencies import DBEngine
from app.schemas.health import HealthResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["health"])

HEALTH_OK = HealthResponse(status="ok", message="Database connected")
HEALTH_ERROR = HealthResponse(status="error", message="Database connection failed")


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": HealthResponse}},
)
async def health_check(engine: DBEngine, response: Response) -> HealthResponse:
    """Check database connectivity with a ``SELECT 1`` on a pooled connection.

    Returns 200 when the query succeeds. Any failure (pool exhaustion, I/O
    error, bad configuration) yields 500 with a fixed message; the cause is
    only logged.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("health_check_failed")
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return HEALTH_ERROR

    return HEALTH_OK
