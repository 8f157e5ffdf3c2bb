"""
Alembic migration environment.

Migrations run over the synchronous DATABASE_URL_SYNC connection against the
metadata of app.models, which covers the user table.
"""

from logging.config import fileConfig

from alembic import context  # type: ignore[attr-defined]
from sqlalchemy import create_engine, pool

from app.core.config import get_settings
from app.models import Base

settings = get_settings()
config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url_sync)

if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit migration SQL without a database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a short-lived sync engine."""
    engine = create_engine(settings.database_url_sync, poolclass=pool.NullPool)

    with engine.connect() as connection:
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
