"""Backend selection: pick the one storage engine used for the process lifetime."""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from fedlink.config import Backend
from fedlink.domain.shared.error import ConfigurationError
from fedlink.domain.shared.port.storage import StorageEngine
from fedlink.infrastructure.persistence.engine import (
    EmbeddedStorageEngine,
    PostgresStorageEngine,
    SqlStorageEngine,
)

logger = logging.getLogger(__name__)

STORAGE_ENGINES: dict[Backend, type[SqlStorageEngine]] = {
    Backend.EMBEDDED: EmbeddedStorageEngine,
    Backend.POSTGRES: PostgresStorageEngine,
}


def select_storage_engine(backend: Backend | str, engine: AsyncEngine) -> StorageEngine:
    """Return the storage engine for the configured backend.

    Raises:
        ConfigurationError: If no engine is registered for `backend`.
    """
    try:
        engine_cls = STORAGE_ENGINES[Backend(backend)]
    except (KeyError, ValueError) as e:
        raise ConfigurationError(
            f"Unknown storage backend: {backend!r}", code="unknown_backend"
        ) from e

    logger.info("Using %s storage backend", engine_cls.backend)
    return engine_cls(engine)
