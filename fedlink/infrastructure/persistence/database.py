"""Database engine creation for both storage backends."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from fedlink.config import Backend, DatabaseConfig

_IN_MEMORY_PATHS = ("", ":memory:")


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure parent directory exists."""
    if not url.startswith("sqlite"):
        return url

    # Extract path from URL (sqlite+aiosqlite:///path or sqlite:///path)
    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    path = url[prefix_end:]

    if path in _IN_MEMORY_PATHS:
        return url

    abs_path = os.path.abspath(os.path.expanduser(path))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)

    return f"{prefix}{abs_path}"


def create_db_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create the async engine for the configured backend."""
    url = _expand_sqlite_path(config.url)

    if config.backend is Backend.EMBEDDED:
        engine_kwargs: dict[str, Any] = {
            "echo": config.echo,
            # One shared connection; aiosqlite runs it on its own thread
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    else:
        engine_kwargs = {
            "echo": config.echo,
            "pool_pre_ping": True,
            "pool_size": config.pool_size,
            "max_overflow": config.max_overflow,
        }

    return create_async_engine(url, **engine_kwargs)
