"""Configuration management: backup options, run context, file layout.

Usage:
    >>> from db_backup.config import load_backup_options, BackupOptions, BackupContext
"""

from db_backup.config.loader import load_backup_options
from db_backup.config.models import BackupContext, BackupOptions, BackupPaths

__all__ = ["load_backup_options", "BackupContext", "BackupOptions", "BackupPaths"]
