"""db-backup: TOC indexing and incremental restore plans for database backups.

Records the byte range of every statement and table written to a backup's
dump files, reads selected statements back at restore time, and keeps
track of which backup in an incremental chain holds each table's data.

Usage:
    from db_backup import TOC, load_toc, statements_for_types
    from db_backup import History, load_history, BackupConfig, RestorePlanEntry
    from db_backup import filter_tables_for_incremental, populate_restore_plan
    from db_backup import BackupContext, BackupOptions, load_backup_options
"""

__version__ = "0.1.0"

# Adapters
from db_backup.adapters.base import CatalogClient
from db_backup.adapters.introspector import CatalogIntrospector
from db_backup.adapters.postgres import AsyncPostgresAdapter

# Config
from db_backup.config.loader import load_backup_options
from db_backup.config.models import BackupContext, BackupOptions, BackupPaths

# Errors
from db_backup.errors import (
    ArtifactError,
    BackupError,
    ByteRangeError,
    IncompatibleBackupError,
    InvalidEntryError,
    NoMatchingBackupError,
)

# Filters and tables
from db_backup.filters import FilterSet
from db_backup.tables import Table

# History
from db_backup.history.history import load_history, write_history
from db_backup.history.models import BackupConfig, History, RestorePlanEntry

# Incremental
from db_backup.incremental.differ import filter_tables_for_incremental
from db_backup.incremental.matcher import get_target_backup_timestamp, latest_matching_backup
from db_backup.incremental.restore_plan import populate_restore_plan
from db_backup.incremental.workflow import prepare_incremental_backup, record_backup

# TOC
from db_backup.toc.statements import all_statements, statements_for_types
from db_backup.toc.toc import TOC, SegmentTOC, load_segment_toc, load_toc, write_segment_toc, write_toc
from db_backup.toc.writer import ByteCountingWriter, write_statement

__all__ = [
    # Adapters
    "CatalogClient",
    "AsyncPostgresAdapter",
    "CatalogIntrospector",
    # Config
    "load_backup_options",
    "BackupContext",
    "BackupOptions",
    "BackupPaths",
    # Errors
    "BackupError",
    "ArtifactError",
    "ByteRangeError",
    "InvalidEntryError",
    "NoMatchingBackupError",
    "IncompatibleBackupError",
    # Filters and tables
    "FilterSet",
    "Table",
    # History
    "History",
    "BackupConfig",
    "RestorePlanEntry",
    "load_history",
    "write_history",
    # Incremental
    "filter_tables_for_incremental",
    "latest_matching_backup",
    "get_target_backup_timestamp",
    "populate_restore_plan",
    "prepare_incremental_backup",
    "record_backup",
    # TOC
    "TOC",
    "SegmentTOC",
    "load_toc",
    "write_toc",
    "load_segment_toc",
    "write_segment_toc",
    "ByteCountingWriter",
    "write_statement",
    "statements_for_types",
    "all_statements",
]
