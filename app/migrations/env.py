"""Alembic environment.

Used in two ways: by ``app.db.migrations.run_migrations`` at application
startup, which passes an open connection in ``config.attributes``, and by
the ``alembic`` CLI, which builds its own engine from ``DATABASE_URL``.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection

from app.config import settings
from app.db.engine import dispose_engine, init_engine, to_async_url

config = context.config

# No declarative models; revisions are written by hand.
target_metadata = None


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Create an engine from settings and run migrations on one connection."""
    engine = init_engine(settings.database_url)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await dispose_engine(engine)


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of executing it."""
    context.configure(
        url=to_async_url(settings.database_url),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


connectable = config.attributes.get("connection", None)

if connectable is not None:
    do_run_migrations(connectable)
elif context.is_offline_mode():
    if config.config_file_name is not None:
        fileConfig(config.config_file_name)
    run_migrations_offline()
else:
    if config.config_file_name is not None:
        fileConfig(config.config_file_name)
    asyncio.run(run_async_migrations())
