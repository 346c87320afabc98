"""Fixtures backed by an in-memory SQLite database."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from fedlink.config import DatabaseConfig
from fedlink.infrastructure.persistence.database import create_db_engine
from fedlink.infrastructure.persistence.engine import EmbeddedStorageEngine
from fedlink.infrastructure.persistence.repository.federation import FederationLinkStore
from fedlink.infrastructure.persistence.tables import metadata

IN_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def sqlite_engine():
    """Per-test in-memory database with the user_federations schema."""
    engine = create_db_engine(DatabaseConfig(url=IN_MEMORY_URL))
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def storage(sqlite_engine: AsyncEngine) -> EmbeddedStorageEngine:
    return EmbeddedStorageEngine(sqlite_engine)


@pytest.fixture
def store(storage: EmbeddedStorageEngine) -> FederationLinkStore:
    return FederationLinkStore(storage)
