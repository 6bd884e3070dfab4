import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context
from db_config import Base
import db_models  # noqa: F401  (registers the tables on Base.metadata)

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """DATABASE_URL wins over alembic.ini so migrations follow the app's database"""
    return os.getenv("DATABASE_URL") or config.get_main_option("sqlalchemy.url")  # type: ignore


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Only a URL is needed, no DBAPI; context.execute() emits SQL to the
    script output.
    """
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
