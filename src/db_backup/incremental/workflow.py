"""Incremental backup steps around the data dump.

Before dumping data, ``prepare_incremental_backup`` anchors the run to a
compatible earlier backup and narrows the table list to what changed.
After the backup succeeds, ``record_backup`` computes the new restore
plan and commits it to the history file in one atomic write.

Usage:
    context = BackupContext(options=load_backup_options())
    history = load_history(context.paths.history_path)

    plan = prepare_incremental_backup(context, history, current_toc, tables)
    ...  # dump plan.changed_tables, write the TOC
    history = record_backup(
        context, history, plan.changed_tables, tables,
        reference_config=plan.reference_config,
    )
"""

import logging

from pydantic import BaseModel

from db_backup.config.models import BackupContext
from db_backup.history.history import write_history
from db_backup.history.models import BackupConfig, History
from db_backup.incremental.differ import filter_tables_for_incremental
from db_backup.incremental.matcher import get_target_backup_timestamp
from db_backup.incremental.restore_plan import full_backup_restore_plan, populate_restore_plan
from db_backup.tables import Table
from db_backup.toc.toc import TOC, load_toc

logger = logging.getLogger(__name__)


class IncrementalPlan(BaseModel):
    """Base backup and table selection of an incremental run."""

    reference_config: BackupConfig
    changed_tables: list[Table]


def prepare_incremental_backup(
    context: BackupContext,
    history: History,
    current_toc: TOC,
    tables: list[Table],
) -> IncrementalPlan:
    """Anchor the run to a base backup and select the tables to capture.

    Args:
        context: The running backup's context.
        history: Backup history, newest first.
        current_toc: TOC of the running backup, with its AO metadata filled in.
        tables: All tables in the backup set.

    Returns:
        ``IncrementalPlan`` with the base backup and the changed tables.

    Raises:
        NoMatchingBackupError: If no earlier backup matches the run's options.
        IncompatibleBackupError: If an explicit base timestamp cannot be used.
        ArtifactError: If the base backup's TOC cannot be loaded.
    """
    current_config = context.current_config()
    timestamp = get_target_backup_timestamp(
        history, current_config, context.options.from_timestamp
    )
    reference_config = history.find_backup_config(timestamp)
    reference_toc = load_toc(context.paths.toc_path(timestamp))

    changed_tables = filter_tables_for_incremental(reference_toc, current_toc, tables)
    return IncrementalPlan(reference_config=reference_config, changed_tables=changed_tables)


def record_backup(
    context: BackupContext,
    history: History,
    backed_up_tables: list[Table],
    all_tables: list[Table],
    reference_config: BackupConfig | None = None,
) -> History:
    """Record a successful backup and its restore plan in the history file.

    Args:
        context: The backup that just completed.
        history: History as loaded before the backup. Not modified.
        backed_up_tables: Tables whose data this backup captured.
        all_tables: Every table currently in the backup set.
        reference_config: Base backup of an incremental run; ``None`` for a
            full backup.

    Returns:
        The committed history, with this backup first.

    Raises:
        ArtifactError: If the history file cannot be written. The file on
            disk is left as it was.
    """
    config = context.current_config()
    if reference_config is None:
        config.restore_plan = full_backup_restore_plan(backed_up_tables, context.timestamp)
    else:
        config.restore_plan = populate_restore_plan(
            backed_up_tables, reference_config.restore_plan, all_tables, context.timestamp
        )

    new_history = history.model_copy(deep=True)
    new_history.add_backup_config(config)
    write_history(new_history, context.paths.history_path)

    logger.info(
        f"Recorded backup {context.timestamp} with {len(backed_up_tables)} tables "
        f"({len(config.restore_plan)} backups in restore plan)"
    )
    return new_history
