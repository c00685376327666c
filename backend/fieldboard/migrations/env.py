from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from fieldboard.db import Base
from fieldboard.models import AUTH_PROVIDER_TABLES  # registers all models on Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

db_url = config.get_main_option("sqlalchemy.url")
if not db_url:
    from fieldboard.config import get_settings

    db_url = get_settings().database_url
    config.set_main_option("sqlalchemy.url", db_url.replace("%", "%%"))

target_metadata = Base.metadata


def include_object(object, name, type_, reflected, compare_to):
    # the auth provider owns its tables
    if type_ == "table" and name in AUTH_PROVIDER_TABLES:
        return False
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        include_object=include_object,
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
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
