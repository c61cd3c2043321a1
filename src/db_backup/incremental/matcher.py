"""Find the prior backup an incremental backup builds on.

An incremental backup is only meaningful against a previous backup taken
with the same options: same backup directory and database, same storage
layout flags, and the same schema/relation filters.
"""

import logging
import os

from db_backup.errors import IncompatibleBackupError, NoMatchingBackupError
from db_backup.filters import FilterSet
from db_backup.history.models import BackupConfig, History

logger = logging.getLogger(__name__)


def _plugin_name(plugin: str) -> str:
    return os.path.basename(plugin)


def matches_incremental_flags(backup_config: BackupConfig, current_config: BackupConfig) -> bool:
    """Return whether *backup_config* can anchor a backup run with *current_config*.

    Scalar options compare exactly, the plugin by binary name only, and
    the four include/exclude lists as unordered sets.

    Example:
        >>> previous = BackupConfig(timestamp="1", plugin="/usr/local/bin/gpbackup_plugin")
        >>> current = BackupConfig(timestamp="2", plugin="gpbackup_plugin")
        >>> matches_incremental_flags(previous, current)
        True
    """
    return (
        backup_config.backup_dir == current_config.backup_dir
        and backup_config.database_name == current_config.database_name
        and backup_config.leaf_partition_data == current_config.leaf_partition_data
        and _plugin_name(backup_config.plugin) == _plugin_name(current_config.plugin)
        and backup_config.single_data_file == current_config.single_data_file
        and backup_config.compressed == current_config.compressed
        and FilterSet(backup_config.include_relations) == FilterSet(current_config.include_relations)
        and FilterSet(backup_config.include_schemas) == FilterSet(current_config.include_schemas)
        and FilterSet(backup_config.exclude_relations) == FilterSet(current_config.exclude_relations)
        and FilterSet(backup_config.exclude_schemas) == FilterSet(current_config.exclude_schemas)
    )


def latest_matching_backup(history: History, current_config: BackupConfig) -> BackupConfig | None:
    """Return the newest backup in *history* matching *current_config*, or ``None``."""
    for backup_config in history.backup_configs:
        if matches_incremental_flags(backup_config, current_config):
            return backup_config
    return None


def get_target_backup_timestamp(
    history: History,
    current_config: BackupConfig,
    from_timestamp: str | None = None,
) -> str:
    """Pick the timestamp of the backup the incremental chain builds on.

    Args:
        history: Backup history, newest first.
        current_config: Options of the running backup.
        from_timestamp: Explicit base backup requested by the operator.

    Returns:
        Timestamp of the base backup.

    Raises:
        IncompatibleBackupError: If *from_timestamp* is not in the history
            or was taken with different options.
        NoMatchingBackupError: If no *from_timestamp* was given and no
            backup in the history matches.
    """
    if from_timestamp:
        backup_config = history.find_backup_config(from_timestamp)
        if backup_config is None:
            raise IncompatibleBackupError(
                f"No backup with timestamp {from_timestamp} found in the backup history."
            )
        if not matches_incremental_flags(backup_config, current_config):
            raise IncompatibleBackupError(
                f"The flags of the backup with timestamp {from_timestamp} do not match "
                f"those of the current backup."
            )
        return from_timestamp

    backup_config = latest_matching_backup(history, current_config)
    if backup_config is None:
        raise NoMatchingBackupError(
            "There was no matching previous backup found with the flags provided. "
            "Please take a full backup."
        )

    logger.info(f"Incremental backup based on {backup_config.timestamp}")
    return backup_config.timestamp
