"""
Alembic Environment Configuration for ViralForge AI

Customized for:
- Async SQLAlchemy/SQLModel
- Database URL resolved the same way as the application
- Exclude Supabase system tables from autogenerate
"""

import asyncio
import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

# Add the backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlmodel import SQLModel

from viralforge.infrastructure.db.database import get_db_manager
import viralforge.infrastructure.db.models  # noqa: F401  (registers tables)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata

# Supabase-managed tables that live next to ours
EXCLUDE_TABLES = {
    "schema_migrations",
    "buckets",
    "objects",
    "refresh_tokens",
    "audit_log_entries",
    "instances",
    "sessions",
    "identities",
    "users",
    "one_time_tokens",
}

EXCLUDE_SCHEMAS = {"auth", "storage", "realtime", "extensions", "graphql", "graphql_public"}


def include_object(object, name, type_, reflected, compare_to):
    """Filter objects for autogenerate."""
    if type_ == "table":
        if name in EXCLUDE_TABLES:
            return False
        if getattr(object, "schema", None) in EXCLUDE_SCHEMAS:
            return False
    return True


def get_url() -> str:
    return get_db_manager()._resolve_database_url()


def run_migrations_offline() -> None:
    """Generate the SQL script without a database connection."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_object=include_object,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        include_object=include_object,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations with an async engine."""
    connectable = create_async_engine(get_url(), poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
