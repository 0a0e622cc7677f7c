"""Startup sequence: build the connection pool and bring the schema up to date.

Both steps must succeed before the server accepts traffic; there is no
degraded mode. Failures are reported as a single ``StartupError`` that the
process entry point checks once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from app.db.engine import dispose_engine, init_engine, verify_connection
from app.db.migrations import run_migrations

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from app.config import Settings

logger = structlog.get_logger()


class StartupError(RuntimeError):
    """The database pool or the migrations could not be set up."""


async def start_database(settings: Settings) -> AsyncEngine:
    """Create the pool, verify it, and apply pending migrations.

    Returns:
        The ready-to-use engine shared by all request handlers.

    Raises:
        StartupError: Wrapping the underlying cause, with a diagnostic message.
    """
    try:
        engine = init_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    except Exception as exc:
        msg = f"Failed to create database pool: {exc}"
        raise StartupError(msg) from exc

    try:
        await verify_connection(engine)
    except Exception as exc:
        await dispose_engine(engine)
        msg = f"Failed to create database pool: {exc}"
        raise StartupError(msg) from exc

    try:
        revision = await run_migrations(engine, settings.migrations_dir)
    except Exception as exc:
        await dispose_engine(engine)
        msg = f"Failed to run migrations: {exc}"
        raise StartupError(msg) from exc

    logger.info(
        "database_ready",
        url=engine.url.render_as_string(hide_password=True),
        revision=revision,
    )
    return engine
