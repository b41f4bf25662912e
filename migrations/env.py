"""
Alembic environment for the finance ledger schema.

The database URL comes from the application settings, so
migrations always target the same database as the service.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from finance_ledger.config import get_settings
from finance_ledger.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Importing finance_ledger.models registers every table on Base.metadata
target_metadata = Base.metadata

config.set_main_option("sqlalchemy.url", get_settings().DATABASE_URL)


def run_migrations_offline() -> None:
    """Emit the migration as SQL without a database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply the migration against the configured database."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
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
    run_migrations_online()
