"""Shared test fixtures: substitute and real engines, settings, HTTP client."""

import threading
from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import anyio
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import Settings
from app.db.engine import dispose_engine, init_engine
from app.main import create_app


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only; the drivers (aiosqlite, asyncpg) need it."""
    return "asyncio"


@pytest.fixture
def mock_connection() -> AsyncMock:
    """A pooled connection whose ``execute`` succeeds."""
    conn = AsyncMock()
    conn.execute.return_value = None
    return conn


@pytest.fixture
def mock_engine(mock_connection: AsyncMock) -> MagicMock:
    """Create a substitute engine, simulating a healthy database.

    ``engine.connect()`` yields ``mock_connection``; exceptions raised inside
    the ``async with`` block propagate.
    """
    engine = MagicMock(spec=AsyncEngine)
    ctx = engine.connect.return_value
    ctx.__aenter__.return_value = mock_connection
    ctx.__aexit__.return_value = False
    return engine


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh SQLite file, ignoring any local .env."""
    return Settings(_env_file=None, database_url=f"sqlite:{tmp_path / 'test.db'}")


@pytest.fixture
async def sqlite_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Yield a real pooled engine on a temporary SQLite file."""
    engine = init_engine(test_settings.database_url)
    yield engine
    await dispose_engine(engine)


@pytest.fixture
async def client(mock_engine: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx AsyncClient for an app built around the mock engine.

    The lifespan does not run under ASGITransport, so no real database is
    created.
    """
    app = create_app(mock_engine)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def new_threads(before: set[threading.Thread]) -> list[threading.Thread]:
    """Return threads started since *before* that are still running."""
    return [t for t in threading.enumerate() if t not in before and t.is_alive()]


@pytest.fixture
async def settle_driver_threads() -> AsyncGenerator[None, None]:
    """Keep the event loop open until driver threads started by the test exit.

    After a failed connect, aiosqlite's worker thread still posts its shutdown
    result back to the loop; it must not find the loop already closed.
    """
    before = set(threading.enumerate())
    yield
    with anyio.move_on_after(2):
        while new_threads(before):
            await anyio.sleep(0.01)
