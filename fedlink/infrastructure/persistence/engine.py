"""SQLAlchemy implementations of the StorageEngine port.

Both backends run the same statements against the same schema. They differ
only in how the driver reports a uniqueness violation.
"""

import logging
import re
from abc import abstractmethod
from collections.abc import Sequence
from typing import Any

from sqlalchemy import TextClause, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from fedlink.config import Backend
from fedlink.domain.shared.error import DatabaseError
from fedlink.domain.shared.port.storage import StorageEngine
from fedlink.infrastructure.persistence.errors import to_database_error

logger = logging.getLogger(__name__)

DEFAULT_SIZE_HINT = 10

_PLACEHOLDER = re.compile(r"\$(\d+)")


def bind_positional(sql: str, params: Sequence[Any]) -> tuple[TextClause, dict[str, Any]]:
    """Rewrite `$n` placeholders as `:pn` binds and pair them with their values."""
    stmt = text(_PLACEHOLDER.sub(lambda m: f":p{m.group(1)}", sql))
    return stmt, {f"p{i}": value for i, value in enumerate(params, start=1)}


class SqlStorageEngine(StorageEngine):
    """Runs one statement per call, each on its own pooled connection."""

    backend: Backend

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def execute(self, sql: str, params: Sequence[Any]) -> int:
        stmt, bound = bind_positional(sql, params)
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt, bound)
                return result.rowcount
        except (SQLAlchemyError, OSError) as e:
            raise self._translate(e) from e

    async def query(
        self, sql: str, params: Sequence[Any], size_hint: int | None = None
    ) -> list[dict[str, Any]]:
        stmt, bound = bind_positional(sql, params)
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt, bound)
                rows: list[dict[str, Any]] = []
                for partition in result.mappings().partitions(size_hint or DEFAULT_SIZE_HINT):
                    rows.extend(dict(row) for row in partition)
                return rows
        except (SQLAlchemyError, OSError) as e:
            raise self._translate(e) from e

    def _translate(self, exc: BaseException) -> DatabaseError:
        orig = getattr(exc, "orig", None)
        unique = orig is not None and self._is_unique_violation(orig)
        error = to_database_error(exc, unique_violation=unique)
        if unique:
            logger.debug("Uniqueness violation on %s backend: %s", self.backend, error.message)
        else:
            logger.warning("Statement failed on %s backend: %s", self.backend, error.message)
        return error

    @abstractmethod
    def _is_unique_violation(self, orig: BaseException) -> bool:
        """Check the driver exception for a structured uniqueness-violation code."""
        ...


class EmbeddedStorageEngine(SqlStorageEngine):
    """SQLite through aiosqlite."""

    backend = Backend.EMBEDDED

    _UNIQUE_ERROR_NAMES = frozenset({"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"})

    def _is_unique_violation(self, orig: BaseException) -> bool:
        return getattr(orig, "sqlite_errorname", None) in self._UNIQUE_ERROR_NAMES


class PostgresStorageEngine(SqlStorageEngine):
    """PostgreSQL through asyncpg."""

    backend = Backend.POSTGRES

    UNIQUE_VIOLATION_SQLSTATE = "23505"

    def _is_unique_violation(self, orig: BaseException) -> bool:
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        return sqlstate == self.UNIQUE_VIOLATION_SQLSTATE
