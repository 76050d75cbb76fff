"""Alembic environment - migrations for the SIS schema over the async engine.

Invariants:
    - The URL comes from sis.config Settings (DATABASE_URL / .env), so migrations and
      the API always target the same database; alembic.ini is the last fallback
    - Every model module is imported before target_metadata is read
    - SQLite runs in batch mode (ALTER TABLE emulation)
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

import sis.models  # noqa: F401
from sis.config import Settings
from sis.db.base import Base

alembic_config = context.config
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

target_metadata = Base.metadata


def migration_url() -> str:
    settings = Settings()
    if "database_url" in settings.model_fields_set:
        return settings.database_url
    return alembic_config.get_main_option("sqlalchemy.url") or settings.database_url


def _configure(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def migrate_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    _configure(url=migration_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})


def _migrate_with(connection: Connection) -> None:
    _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")


async def migrate_online() -> None:
    engine = create_async_engine(migration_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate_with)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    migrate_offline()
else:
    asyncio.run(migrate_online())
