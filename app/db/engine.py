"""Async database engine construction and connection-string handling."""

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

_MEMORY_DATABASES = (None, "", ":memory:")


def to_async_url(database_url: str) -> str:
    """Rewrite a connection string into a SQLAlchemy async URL.

    Accepts the short SQLite forms ``sqlite:<path>``, ``sqlite://<path>`` and
    ``sqlite::memory:`` as well as regular SQLAlchemy URLs. Plain ``sqlite``
    and ``postgres`` URLs get the ``aiosqlite`` and ``asyncpg`` drivers;
    URLs that already name a driver are returned unchanged.

    >>> to_async_url("sqlite:./database.db")
    'sqlite+aiosqlite:///./database.db'
    """
    url = database_url.strip()
    scheme, sep, rest = url.partition(":")
    if not sep or "+" in scheme:
        return url

    if scheme == "sqlite":
        if rest.startswith("///"):
            return f"sqlite+aiosqlite:{rest}"
        path = rest[2:] if rest.startswith("//") else rest
        return f"sqlite+aiosqlite:///{path}"

    if scheme in ("postgres", "postgresql"):
        return f"postgresql+asyncpg:{rest}"

    return url


def init_engine(
    database_url: str,
    *,
    pool_size: int = 5,
    max_overflow: int = 5,
) -> AsyncEngine:
    """Create the pooled async engine.

    Args:
        database_url: Connection string, normalized with :func:`to_async_url`.
        pool_size: Number of connections kept open in the pool.
        max_overflow: Connections allowed beyond ``pool_size`` under load.

    Raises:
        sqlalchemy.exc.ArgumentError: If the URL cannot be parsed.
    """
    url = make_url(to_async_url(database_url))

    options: dict = {"pool_pre_ping": True, "echo": False}
    # In-memory SQLite is served from a single static connection
    if not (url.get_backend_name() == "sqlite" and url.database in _MEMORY_DATABASES):
        options.update(pool_size=pool_size, max_overflow=max_overflow)

    return create_async_engine(url, **options)


async def verify_connection(engine: AsyncEngine) -> None:
    """Open one pooled connection and run ``SELECT 1``.

    Creates the SQLite file on first use. Lets the driver error propagate.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine(engine: AsyncEngine) -> None:
    """Dispose the async engine, closing all connections."""
    await engine.dispose()
