"""Fixtures for PostgreSQL integration tests."""

import os

import pytest
import pytest_asyncio

from fedlink.config import Backend, DatabaseConfig
from fedlink.infrastructure.persistence.database import create_db_engine
from fedlink.infrastructure.persistence.tables import metadata, user_federations_table


def _get_pg_url() -> str:
    url = os.environ.get("FEDLINK_DATABASE__URL", "")
    if "postgres" not in url:
        pytest.skip("FEDLINK_DATABASE__URL not set to PostgreSQL")
    return url


@pytest_asyncio.fixture
async def pg_engine():
    """Per-test async engine with the user_federations schema."""
    engine = create_db_engine(DatabaseConfig(backend=Backend.POSTGRES, url=_get_pg_url()))
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine

    # Truncate after each test
    async with engine.begin() as conn:
        await conn.execute(user_federations_table.delete())
    await engine.dispose()

