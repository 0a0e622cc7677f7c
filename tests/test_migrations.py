"""Tests for the alembic migration runner against real SQLite files."""

import shutil
from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import MIGRATIONS_DIR
from app.db.migrations import build_alembic_config, run_migrations


async def _table_names(engine: AsyncEngine) -> set[str]:
    async with engine.connect() as conn:
        return set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))


async def _scalar(engine: AsyncEngine, sql: str):
    async with engine.connect() as conn:
        return (await conn.execute(text(sql))).scalar_one()


@pytest.mark.anyio
async def test_applies_initial_schema(sqlite_engine: AsyncEngine) -> None:
    revision = await run_migrations(sqlite_engine, MIGRATIONS_DIR)

    assert revision == "001"
    assert {"_migration_test", "alembic_version"} <= await _table_names(sqlite_engine)
    assert await _scalar(sqlite_engine, "SELECT id FROM _migration_test") == 1
    assert await _scalar(sqlite_engine, "SELECT version_num FROM alembic_version") == "001"


@pytest.mark.anyio
async def test_rerun_is_idempotent(sqlite_engine: AsyncEngine) -> None:
    """A second run skips applied revisions: no error, no duplicate seed row."""
    await run_migrations(sqlite_engine, MIGRATIONS_DIR)
    revision = await run_migrations(sqlite_engine, MIGRATIONS_DIR)

    assert revision == "001"
    assert await _scalar(sqlite_engine, "SELECT COUNT(*) FROM _migration_test") == 1


@pytest.mark.anyio
async def test_created_at_defaults(sqlite_engine: AsyncEngine) -> None:
    await run_migrations(sqlite_engine, MIGRATIONS_DIR)

    created_at = await _scalar(sqlite_engine, "SELECT created_at FROM _migration_test")
    assert created_at is not None


@pytest.mark.anyio
async def test_missing_directory_raises(sqlite_engine: AsyncEngine, tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await run_migrations(sqlite_engine, tmp_path / "nowhere")


def test_alembic_config_points_at_directory() -> None:
    config = build_alembic_config(MIGRATIONS_DIR)
    assert config.get_main_option("script_location") == str(MIGRATIONS_DIR)


_BROKEN_REVISION = '''"""Revision that fails after its first statement."""

from alembic import op

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE TABLE half_applied (id INTEGER PRIMARY KEY)")
    op.execute("THIS IS NOT SQL")


def downgrade() -> None:
    op.drop_table("half_applied")
'''


@pytest.mark.anyio
async def test_failed_revision_is_not_recorded(sqlite_engine: AsyncEngine, tmp_path: Path) -> None:
    """A revision that errors propagates and leaves alembic_version at the last good one."""
    script_dir = tmp_path / "migrations"
    shutil.copytree(MIGRATIONS_DIR, script_dir, ignore=shutil.ignore_patterns("__pycache__"))
    await run_migrations(sqlite_engine, script_dir)
    (script_dir / "versions" / "002_broken.py").write_text(_BROKEN_REVISION)

    with pytest.raises(OperationalError):
        await run_migrations(sqlite_engine, script_dir)

    assert await _scalar(sqlite_engine, "SELECT version_num FROM alembic_version") == "001"
