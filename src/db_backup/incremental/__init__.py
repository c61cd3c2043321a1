"""Incremental backup: base-backup matching, change detection, restore plans.

Usage:
    from db_backup.incremental import filter_tables_for_incremental
    from db_backup.incremental import latest_matching_backup, get_target_backup_timestamp
    from db_backup.incremental import populate_restore_plan
    from db_backup.incremental import prepare_incremental_backup, record_backup
"""

from db_backup.incremental.differ import filter_tables_for_incremental
from db_backup.incremental.matcher import (
    get_target_backup_timestamp,
    latest_matching_backup,
    matches_incremental_flags,
)
from db_backup.incremental.queries import get_ao_incremental_metadata
from db_backup.incremental.restore_plan import full_backup_restore_plan, populate_restore_plan
from db_backup.incremental.workflow import (
    IncrementalPlan,
    prepare_incremental_backup,
    record_backup,
)

__all__ = [
    "filter_tables_for_incremental",
    "matches_incremental_flags",
    "latest_matching_backup",
    "get_target_backup_timestamp",
    "get_ao_incremental_metadata",
    "populate_restore_plan",
    "full_backup_restore_plan",
    "IncrementalPlan",
    "prepare_incremental_backup",
    "record_backup",
]
