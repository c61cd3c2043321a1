"""Backup history: recorded backup options and restore plans.

Usage:
    from db_backup.history import History, BackupConfig, RestorePlanEntry
    from db_backup.history import load_history, write_history
"""

from db_backup.history.history import load_history, write_history
from db_backup.history.models import BackupConfig, History, RestorePlanEntry

__all__ = [
    "BackupConfig",
    "History",
    "RestorePlanEntry",
    "load_history",
    "write_history",
]
