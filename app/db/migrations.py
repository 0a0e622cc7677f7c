"""Apply alembic migrations against the application's async engine."""

from pathlib import Path

import structlog
from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger()


def build_alembic_config(script_location: Path) -> Config:
    """Return an alembic ``Config`` pointing at *script_location*.

    No ini file is read; the connection is supplied by the caller through
    ``config.attributes``.
    """
    config = Config()
    config.set_main_option("script_location", str(script_location))
    return config


def _upgrade(connection: Connection, config: Config) -> None:
    config.attributes["connection"] = connection
    command.upgrade(config, "head")


def _current_revision(connection: Connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


async def run_migrations(engine: AsyncEngine, script_location: Path) -> str | None:
    """Upgrade the database to the newest revision.

    Revisions already recorded in ``alembic_version`` are skipped, so calling
    this on every startup is safe. Pending revisions share one connection
    transaction, which is only atomic on backends with transactional DDL
    (PostgreSQL). SQLite commits DDL as it goes, so a revision that fails
    partway can leave its earlier statements applied.

    Args:
        engine: Pooled engine to take the migration connection from.
        script_location: Directory containing ``env.py`` and ``versions/``.

    Returns:
        The revision the database is at after the upgrade.
    """
    if not script_location.is_dir():
        msg = f"Migrations directory not found: {script_location}"
        raise FileNotFoundError(msg)

    config = build_alembic_config(script_location)

    async with engine.begin() as conn:
        before = await conn.run_sync(_current_revision)
        await conn.run_sync(_upgrade, config)
        after = await conn.run_sync(_current_revision)

    if before == after:
        logger.info("migrations_up_to_date", revision=after)
    else:
        logger.info("migrations_applied", from_revision=before, to_revision=after)
    return after
