"""Exception hierarchy for backup and restore operations.

Every exception here aborts the current backup or restore invocation.
Callers decide whether that terminates the process (the CLI exits 1) or
propagates to an orchestrator. Filters that match nothing are not errors:
they return empty lists.

Usage:
    from db_backup.errors import BackupError, NoMatchingBackupError

    try:
        timestamp = get_target_backup_timestamp(history, current_config)
    except NoMatchingBackupError:
        ...  # run a full backup first
"""


class BackupError(Exception):
    """Base class for fatal backup/restore errors."""

    pass


class ArtifactError(BackupError):
    """Raised when a TOC, segment TOC, or history file cannot be read, written, or parsed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{message}: {path}")


class ByteRangeError(BackupError):
    """Raised when a ranged read extends past the end of a dump file or cannot be decoded."""

    pass


class InvalidEntryError(BackupError):
    """Raised when a TOC entry is empty or overlaps the previous entry."""

    pass


class NoMatchingBackupError(BackupError):
    """Raised when no prior backup can anchor an incremental backup."""

    pass


class IncompatibleBackupError(BackupError):
    """Raised when an explicitly requested base backup is missing or has different flags."""

    pass
