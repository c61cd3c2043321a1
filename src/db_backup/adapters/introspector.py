"""Catalog introspection of the backup set via pg_catalog.

Lists the tables a backup covers, after applying the schema and relation
filters of its options, and reports the role the backup connects as.

Uses psycopg (v3) async connections.
"""

import psycopg
from psycopg import AsyncConnection

from db_backup.config.models import BackupOptions
from db_backup.filters import FilterSet
from db_backup.tables import Table, make_fqn


class CatalogIntrospector:
    """Introspects the tables of a PostgreSQL/Greenplum database.

    Usage:
        async with CatalogIntrospector(database_url) as introspector:
            tables = await introspector.get_tables(options)
            active_role = await introspector.get_current_user()
    """

    # Schemas that are never part of a backup
    EXCLUDED_SCHEMAS = {
        "pg_catalog",
        "information_schema",
        "gp_toolkit",
        "pg_toast",
        "pg_aoseg",
        "pg_bitmapindex",
    }

    def __init__(self, database_url: str):
        """Initialize with database connection URL.

        Args:
            database_url: PostgreSQL connection URL
        """
        self._database_url = database_url
        self._conn: AsyncConnection | None = None

    async def __aenter__(self) -> "CatalogIntrospector":
        """Async context manager entry - opens connection."""
        # Append connect_timeout if not already in URL
        url = self._database_url
        if "connect_timeout" not in url:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}connect_timeout=10"

        self._conn = await AsyncConnection.connect(url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - closes connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def test_connection(self) -> bool:
        """Run ``SELECT 1`` against the open connection.

        Raises:
            ConnectionError: If the query fails.
        """
        try:
            async with self._conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()
            return True
        except psycopg.Error as e:
            raise ConnectionError(f"Connection test failed: {e}") from e

    async def get_tables(self, options: BackupOptions) -> list[Table]:
        """Get the tables in the backup set, ordered by FQN.

        Args:
            options: Backup options carrying the schema and relation filters.

        Returns:
            Tables passing every filter.
        """
        if not self._conn:
            raise RuntimeError("Introspector not connected. Use async with statement.")

        include_schemas = FilterSet.include(options.include_schemas)
        exclude_schemas = FilterSet.exclude(options.exclude_schemas)
        include_relations = FilterSet.include(options.include_relations)
        exclude_relations = FilterSet.exclude(options.exclude_relations)

        tables = []
        for oid, schema_name, name in await self._get_all_tables():
            if schema_name in self.EXCLUDED_SCHEMAS or schema_name.startswith("pg_temp_"):
                continue
            if not (include_schemas.matches(schema_name) and exclude_schemas.matches(schema_name)):
                continue
            fqn = make_fqn(schema_name, name)
            if not (include_relations.matches(fqn) and exclude_relations.matches(fqn)):
                continue
            tables.append(Table(oid=oid, schema_name=schema_name, name=name))
        return tables

    async def get_current_user(self) -> str:
        """Get the role this connection is authenticated as."""
        if not self._conn:
            raise RuntimeError("Introspector not connected. Use async with statement.")

        async with self._conn.cursor() as cur:
            await cur.execute("SELECT current_user")
            row = await cur.fetchone()
            return row[0]

    async def _get_all_tables(self) -> list[tuple[int, str, str]]:
        """Get (oid, schema, name) of every ordinary and partitioned table."""
        query = """
            SELECT c.oid, n.nspname, c.relname
            FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE c.relkind IN ('r', 'p')
            ORDER BY n.nspname, c.relname
        """
        async with self._conn.cursor() as cur:
            await cur.execute(query)
            return [(row[0], row[1], row[2]) for row in await cur.fetchall()]
