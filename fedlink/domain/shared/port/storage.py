"""Port for the storage engines that execute fixed SQL statements."""

from abc import abstractmethod
from collections.abc import Sequence
from typing import Any, Protocol

from fedlink.config import Backend
from fedlink.domain.shared.port import Port


class StorageEngine(Port, Protocol):
    """Statement execution primitives shared by every backend.

    Statements use `$1`, `$2`, ... positional placeholders. Each call runs
    exactly one statement and translates any backend failure into
    `DatabaseError`.
    """

    backend: Backend

    @abstractmethod
    async def execute(self, sql: str, params: Sequence[Any]) -> int:
        """Run a write statement. Returns the number of affected rows."""
        ...

    @abstractmethod
    async def query(
        self, sql: str, params: Sequence[Any], size_hint: int | None = None
    ) -> list[dict[str, Any]]:
        """Run a read statement and return every matching row.

        Args:
            sql: Statement with positional placeholders.
            params: Values bound to `$1..$n` in order.
            size_hint: Rows fetched per batch. Never limits the result.
        """
        ...
