from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from fedlink.config import Config
from fedlink.infrastructure.persistence.migrate import to_sync_url
from fedlink.infrastructure.persistence.tables import metadata

config = context.config

# Keep the application's logging setup when invoked from run_migrations()
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = metadata


def _get_database_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if not url:
        url = to_sync_url(Config().database.url)
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=_get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = _get_database_url()

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
