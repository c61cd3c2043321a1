"""Catalog client protocol definition.

Defines the ``CatalogClient`` Protocol the incremental-metadata queries
run against. All methods are ``async def``.

Usage:
    from db_backup.adapters.base import CatalogClient

    async def list_schemas(client: CatalogClient) -> list[str]:
        rows = await client.query("SELECT nspname FROM pg_namespace")
        return [row["nspname"] for row in rows]
"""

from typing import Any, Protocol


class CatalogClient(Protocol):
    """Read-only catalog query interface.

    Connection and session management stay with the implementation;
    callers only run parameterized queries and close the client.
    """

    async def query(self, sql: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Run a parameterized query and return its rows.

        Args:
            sql: SQL text with ``:name`` placeholders.
            params: Optional dict of named parameters.

        Returns:
            List of dicts, one per row, keyed by column name. Empty list
            if no rows.

        Example:
            rows = await client.query(
                "SELECT relname FROM pg_class WHERE relnamespace = :ns",
                {"ns": 2200},
            )
        """
        ...

    async def close(self) -> None:
        """Close the client and release its connections."""
        ...
