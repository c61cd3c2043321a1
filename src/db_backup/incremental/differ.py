"""Decide which tables an incremental backup must capture again."""

import logging

from db_backup.tables import Table
from db_backup.toc.models import AOEntry
from db_backup.toc.toc import TOC

logger = logging.getLogger(__name__)

_NOT_RECORDED = AOEntry()


def filter_tables_for_incremental(reference_toc: TOC, current_toc: TOC, tables: list[Table]) -> list[Table]:
    """Return the subset of *tables* whose data changed since *reference_toc*.

    Tables without AO metadata in *current_toc* have no cheap change
    signal and are always returned. AO tables are returned when their
    ``modcount`` (row changes) or ``last_ddl_timestamp`` (storage
    rewrites) differ from the reference snapshot. A table missing from the
    reference snapshot always differs.

    Args:
        reference_toc: TOC of the backup the incremental chain builds on.
        current_toc: TOC of the running backup, with current AO metadata.
        tables: Candidate tables.

    Returns:
        Changed tables, in the order of *tables*.

    Examples:
        >>> from db_backup.toc.models import IncrementalMetadata
        >>> ao = IncrementalMetadata(ao={"public.t1": AOEntry(modcount=5, last_ddl_timestamp=100)})
        >>> toc = TOC(incremental_metadata=ao)
        >>> tables = [Table(schema_name="public", name="t1"), Table(schema_name="public", name="t2")]
        >>> [t.fqn for t in filter_tables_for_incremental(toc, toc, tables)]
        ['public.t2']
    """
    reference_ao = reference_toc.incremental_metadata.ao
    current_ao = current_toc.incremental_metadata.ao

    changed: list[Table] = []
    for table in tables:
        current_entry = current_ao.get(table.fqn)
        if current_entry is None:
            changed.append(table)
            continue

        reference_entry = reference_ao.get(table.fqn, _NOT_RECORDED)
        if (
            reference_entry.modcount != current_entry.modcount
            or reference_entry.last_ddl_timestamp != current_entry.last_ddl_timestamp
        ):
            logger.debug(f"{table.fqn} changed since reference backup")
            changed.append(table)

    logger.info(f"{len(changed)} of {len(tables)} tables need to be backed up")
    return changed
