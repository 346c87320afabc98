"""Database migration utilities.

Migrations run synchronously before any async work starts, so the
async/sync boundary stays in one place.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.exc import SQLAlchemyError

from fedlink.infrastructure.persistence.errors import to_database_error

logger = logging.getLogger(__name__)

# Project root where alembic.ini lives
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def to_sync_url(database_url: str) -> str:
    """Convert async database URL to sync equivalent for migrations.

    Alembic runs synchronously, so we need sync drivers:
    - sqlite+aiosqlite:/// -> sqlite:///
    - postgresql+asyncpg:// -> postgresql+psycopg://
    """
    url = database_url.replace("+aiosqlite", "").replace("+asyncpg", "+psycopg")
    if "sqlite:///" in url:
        parts = url.split("///", 1)
        if len(parts) == 2 and parts[1].startswith("~"):
            url = f"sqlite:///{Path(parts[1]).expanduser()}"
    return url


def get_alembic_config(database_url: str) -> AlembicConfig:
    """Create Alembic config pointing at the given database."""
    config = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", to_sync_url(database_url))
    # Logging is already configured by the application
    config.attributes["configure_logger"] = False
    return config


def run_migrations(database_url: str) -> None:
    """Upgrade the database to the latest revision.

    Raises:
        DatabaseError: If the database cannot be opened or a revision fails.
    """
    sync_url = to_sync_url(database_url)

    try:
        if "sqlite:///" in sync_url:
            db_path = sync_url.split("///")[-1]
            if db_path not in ("", ":memory:"):
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        command.upgrade(get_alembic_config(database_url), "head")
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Migration failed: %s", e)
        raise to_database_error(e) from e
    logger.info("Database migrations complete")
