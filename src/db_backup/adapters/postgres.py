"""Async PostgreSQL/Greenplum catalog client.

Provides ``AsyncPostgresAdapter``, an async implementation of the
``CatalogClient`` protocol using SQLAlchemy's async engine with the
``asyncpg`` driver.

Usage:
    from db_backup.adapters.postgres import AsyncPostgresAdapter

    adapter = AsyncPostgresAdapter("postgresql://gpadmin@coordinator:5432/sales")
    rows = await adapter.query("SELECT oid, relname FROM pg_class LIMIT 5")
    await adapter.close()
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


def create_async_engine_pooled(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async SQLAlchemy engine with a small connection pool.

    Default pool settings:

    - ``pool_size=2``: Catalog queries run one at a time per backup.
    - ``max_overflow=0``: Never open more sessions than the pool holds.
    - ``pool_pre_ping=True``: Validate connections before checkout.

    Args:
        database_url: PostgreSQL connection URL with ``postgresql+asyncpg://``
            scheme.
        **kwargs: Additional keyword arguments forwarded to
            ``create_async_engine``.

    Returns:
        Configured ``AsyncEngine``.
    """
    defaults: dict[str, Any] = {
        "pool_size": 2,
        "max_overflow": 0,
        "pool_pre_ping": True,
        "echo": False,
    }
    # Caller kwargs override defaults
    merged = {**defaults, **kwargs}

    return create_async_engine(database_url, **merged)


def normalize_url(database_url: str) -> str:
    """Rewrite ``postgres://`` and ``postgresql://`` URLs to the asyncpg dialect.

    Example:
        >>> normalize_url("postgres://gpadmin@cdw:5432/sales")
        'postgresql+asyncpg://gpadmin@cdw:5432/sales'
    """
    url = database_url
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


class AsyncPostgresAdapter:
    """Async PostgreSQL implementation of the ``CatalogClient`` protocol.

    Args:
        database_url: PostgreSQL connection URL. Accepts ``postgres://``,
            ``postgresql://``, or ``postgresql+asyncpg://`` schemes.
        **engine_kwargs: Additional keyword arguments forwarded to
            ``create_async_engine_pooled``.
    """

    def __init__(self, database_url: str, **engine_kwargs: Any) -> None:
        self._engine: AsyncEngine = create_async_engine_pooled(
            normalize_url(database_url), **engine_kwargs
        )

    async def query(self, sql: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Run a read-only catalog query and return rows as dicts."""
        async with self._engine.connect() as conn:
            result = await conn.execute(text(sql), params or {})
            col_names = list(result.keys())
            rows = result.fetchall()
            return [self._serialize_row(dict(zip(col_names, row))) for row in rows]

    async def close(self) -> None:
        """Close the async engine and dispose of the connection pool."""
        if self._engine:
            await self._engine.dispose()

    # ------------------------------------------------------------------
    # Serialization Helpers
    # ------------------------------------------------------------------

    def _serialize_value(self, value: Any) -> Any:
        """Convert datetimes to ISO strings so rows are JSON-compatible."""
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    def _serialize_row(self, row: dict) -> dict:
        """Serialize all values in a row dict."""
        return {k: self._serialize_value(v) for k, v in row.items()}
