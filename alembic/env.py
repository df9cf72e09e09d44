"""
Alembic environment configuration for Credence's database migrations.

This script sets up the migration context, connects to the database using the
DATABASE_URL of the active settings, and defines the target metadata for the
SQLModel models. Migrations run over the same asyncpg driver as the
application.
"""
import asyncio  # For running the async engine
from logging.config import fileConfig  # For configuring logging

from sqlalchemy import pool  # For database connection
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config
from sqlmodel import SQLModel  # For metadata

from alembic import context  # For migration context

from src.core.config.settings import get_settings
from src.domain.entities.user import User  # noqa: F401  registers the users table
from src.infrastructure.database.async_db import build_async_url

# Alembic Config object, provides access to alembic.ini
config = context.config

settings = get_settings()
if settings.uses_in_memory_store:
    raise RuntimeError("Migrations need a SQL database; set DATABASE_URL or POSTGRES_HOST")

# Set database URL from settings for consistency with FastAPI
config.set_main_option("sqlalchemy.url", build_async_url(settings.DATABASE_URL))

# Configure logging from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Target metadata for SQLModel models, includes all defined tables
target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode, generating SQL scripts without a database connection.
    """
    url = config.get_main_option("sqlalchemy.url")  # Database URL from config
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,  # Use literal SQL values
        dialect_opts={"paramstyle": "named"},  # Named parameters for SQL
    )

    with context.begin_transaction():
        context.run_migrations()  # Generate SQL scripts


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()  # Apply migrations


async def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode, connecting to the database.

    Uses a non-pooled connection to avoid conflicts during migrations.
    """
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),  # Database config from alembic.ini
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,  # Disable pooling for migrations
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()  # Run offline migrations
else:
    asyncio.run(run_migrations_online())  # Run online migrations
