"""Maintain the restore plan: which backup holds each table's data.

The restore plan is a chain of ``RestorePlanEntry`` records, oldest first.
After every successful backup each live table appears in at most one
entry, the one for the latest backup that captured its data.
"""

from db_backup.history.models import RestorePlanEntry
from db_backup.tables import Table, fqn_index, table_fqns


def populate_restore_plan(
    changed_tables: list[Table],
    restore_plan: list[RestorePlanEntry],
    all_tables: list[Table],
    timestamp: str,
) -> list[RestorePlanEntry]:
    """Build the restore plan for the backup at *timestamp*.

    Every existing entry loses the tables captured again by this backup
    (their newest data is now here) and the tables no longer in the
    database. A new entry listing *changed_tables* is appended.

    This is a one-shot transition to run once per successful backup:
    applying it twice appends a second entry for *timestamp*. The input
    chain is not modified.

    Args:
        changed_tables: Tables captured by this backup.
        restore_plan: Restore plan of the base backup.
        all_tables: Every table currently in the backup set.
        timestamp: Timestamp of this backup.

    Returns:
        New restore plan, ending with this backup's entry.

    Examples:
        >>> t = lambda n: Table(schema_name="public", name=n)
        >>> plan = [RestorePlanEntry(timestamp="T0", table_fqns=["public.a", "public.b", "public.c"])]
        >>> new_plan = populate_restore_plan([t("b")], plan, [t("a"), t("b"), t("c")], "T1")
        >>> [(e.timestamp, e.table_fqns) for e in new_plan]
        [('T0', ['public.a', 'public.c']), ('T1', ['public.b'])]
    """
    changed = fqn_index(changed_tables)
    live = fqn_index(all_tables)

    new_plan: list[RestorePlanEntry] = []
    for entry in restore_plan:
        kept = [fqn for fqn in entry.table_fqns if fqn not in changed and fqn in live]
        new_plan.append(RestorePlanEntry(timestamp=entry.timestamp, table_fqns=kept))

    new_plan.append(RestorePlanEntry(timestamp=timestamp, table_fqns=table_fqns(changed_tables)))
    return new_plan


def full_backup_restore_plan(tables: list[Table], timestamp: str) -> list[RestorePlanEntry]:
    """Restore plan of a full backup: every table lives in the backup itself."""
    return [RestorePlanEntry(timestamp=timestamp, table_fqns=table_fqns(tables))]
