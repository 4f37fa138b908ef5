"""
Alembic environment for Mediaboard (async SQLAlchemy).

The database URL comes from `mediaboard.core.config.settings` (`DATABASE_URL`
or the composed `POSTGRES_*` DSN). Override it per run with:

    alembic -x url=sqlite+aiosqlite:///./local.db upgrade head
"""

import asyncio
import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from mediaboard.core.config import settings  # noqa: E402
from mediaboard.db.base import Base  # noqa: E402  (imports every model)

config = context.config

if config.config_file_name:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _database_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("url")
    return override or settings.ASYNC_DATABASE_URL


DATABASE_URL = _database_url()
config.set_main_option("sqlalchemy.url", DATABASE_URL)
target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    # SQLite cannot ALTER constraints in place; batch mode rebuilds the table.
    _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
