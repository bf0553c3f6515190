# migrations/env.py

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from composition_service.adapters.configuration.config import get_settings
from composition_service.adapters.outbound.persistence.models import Base

target_metadata = Base.metadata

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

# Migrações rodam com driver síncrono (psycopg2)
DB_URL = str(get_settings().DATABASE_URL)
SYNC_DB_URL = DB_URL.replace("+asyncpg", "+psycopg2").replace("+aiosqlite", "")


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode (emit SQL without a connection).
    """
    context.configure(
        url=SYNC_DB_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_synchronous_migrations() -> None:
    """
    Run migrations with a synchronous engine.
    """
    configuration = context.config.get_section(context.config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = SYNC_DB_URL

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_synchronous_migrations()
