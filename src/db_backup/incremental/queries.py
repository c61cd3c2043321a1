"""Catalog queries gathering append-optimized change counters.

For every append-optimized table the backup records two counters in its
TOC: the total ``modcount`` across all segments' aoseg entries and the
time of the last storage-affecting DDL (``ALTER`` or ``TRUNCATE``) from
``pg_stat_last_operation``. Comparing them with a reference backup's
counters tells the differ which AO tables changed.
"""

import logging

from db_backup.adapters.base import CatalogClient
from db_backup.tables import make_fqn
from db_backup.toc.models import AOEntry, IncrementalMetadata

logger = logging.getLogger(__name__)

AO_TABLES_QUERY = """
SELECT
	c.oid,
	n.nspname AS schemaname,
	c.relname AS relname,
	seg.relname AS segrelname,
	coalesce((
		SELECT extract(epoch FROM max(o.statime))::bigint
		FROM pg_stat_last_operation o
		WHERE o.objid = c.oid
			AND o.staactionname IN ('ALTER', 'TRUNCATE')
	), 0) AS lastddltimestamp
FROM pg_class c
JOIN pg_namespace n ON n.oid = c.relnamespace
JOIN pg_appendonly a ON a.relid = c.oid
JOIN pg_class seg ON seg.oid = a.segrelid
WHERE n.nspname NOT LIKE 'pg_temp_%'
	AND n.nspname NOT IN ('pg_catalog', 'information_schema', 'gp_toolkit')
ORDER BY n.nspname, c.relname
"""


def quote_ident(identifier: str) -> str:
    """Quote *identifier* for direct inclusion in SQL text.

    Example:
        >>> quote_ident('pg_aoseg_16384')
        '"pg_aoseg_16384"'
    """
    return '"' + identifier.replace('"', '""') + '"'


def modcount_query(segrelname: str) -> str:
    """Query summing ``modcount`` of an aoseg relation across all segments."""
    return (
        "SELECT coalesce(sum(modcount), 0)::bigint AS modcount "
        f"FROM gp_dist_random('pg_aoseg.{quote_ident(segrelname)}')"
    )


async def get_ao_incremental_metadata(
    client: CatalogClient, table_fqns: set[str] | None = None
) -> IncrementalMetadata:
    """Collect AO change counters for the current database.

    Args:
        client: Catalog client connected to the coordinator.
        table_fqns: When given, only these tables are queried.

    Returns:
        ``IncrementalMetadata`` keyed by table FQN.
    """
    rows = await client.query(AO_TABLES_QUERY)

    ao: dict[str, AOEntry] = {}
    for row in rows:
        fqn = make_fqn(row["schemaname"], row["relname"])
        if table_fqns is not None and fqn not in table_fqns:
            continue

        modcount_rows = await client.query(modcount_query(row["segrelname"]))
        modcount = modcount_rows[0]["modcount"] if modcount_rows else 0
        ao[fqn] = AOEntry(modcount=modcount, last_ddl_timestamp=row["lastddltimestamp"])

    logger.info(f"Collected incremental metadata for {len(ao)} append-optimized tables")
    return IncrementalMetadata(ao=ao)
