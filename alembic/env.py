"""
Alembic environment for the BrainBolt schema.

Migrations run through the async engine, so the same URLs work here and in
the application (``postgresql+asyncpg://`` or ``sqlite+aiosqlite://``).
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from brainbolt.common.exceptions import ConfigurationError
from brainbolt.config import get_settings
from brainbolt.database import models  # noqa: F401
from brainbolt.database.base import metadata

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

target_metadata = metadata


def get_url() -> str:
    """Explicit URL from the caller, else the application settings, else alembic.ini."""
    url = config.attributes.get("database_url")
    if url:
        return url
    try:
        return get_settings().DATABASE_URL
    except ConfigurationError:
        return config.get_main_option("sqlalchemy.url")


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(get_url(), poolclass=pool.NullPool)

    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
