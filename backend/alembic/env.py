from logging.config import fileConfig
import os

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

from hms.models.base import Base
# Import all models so they are registered with Base.metadata
import hms.models.user  # noqa: F401
import hms.models.patient  # noqa: F401
import hms.models.doctor  # noqa: F401
import hms.models.staff  # noqa: F401
import hms.models.appointment  # noqa: F401
import hms.models.patient_history  # noqa: F401
import hms.models.room  # noqa: F401
import hms.models.medicine  # noqa: F401
import hms.models.admission  # noqa: F401

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Use the app's metadata for autogenerate support
target_metadata = Base.metadata

# Override sqlalchemy.url from environment unless the caller set one explicitly
database_url = os.environ.get("DATABASE_URL")
if database_url and not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", database_url)


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection, target_metadata=target_metadata
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
