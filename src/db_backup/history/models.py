"""Pydantic models for the backup history artifact.

The history file records, for every completed backup, the options that
produced it and its restore plan: the chain of backups holding the
authoritative data of each table.

Example:
    >>> config = BackupConfig(timestamp="20240101120000", database_name="sales")
    >>> config.restore_plan.append(
    ...     RestorePlanEntry(timestamp="20240101120000", table_fqns=["public.orders"])
    ... )
    >>> History(backup_configs=[config]).find_backup_config("20240101120000").database_name
    'sales'
"""

from pydantic import BaseModel, Field


class RestorePlanEntry(BaseModel):
    """Tables whose authoritative data lives in the backup at *timestamp*."""

    timestamp: str
    table_fqns: list[str] = Field(default_factory=list)


class BackupConfig(BaseModel):
    """Snapshot of the options a backup ran with."""

    timestamp: str
    backup_dir: str = ""
    database_name: str = ""
    leaf_partition_data: bool = False
    plugin: str = ""  # full path of the storage plugin binary, if any
    single_data_file: bool = False
    compressed: bool = True
    incremental: bool = False
    include_schemas: list[str] = Field(default_factory=list)
    exclude_schemas: list[str] = Field(default_factory=list)
    include_relations: list[str] = Field(default_factory=list)
    exclude_relations: list[str] = Field(default_factory=list)
    restore_plan: list[RestorePlanEntry] = Field(default_factory=list)


class History(BaseModel):
    """All recorded backups, newest first."""

    backup_configs: list[BackupConfig] = Field(default_factory=list)

    def add_backup_config(self, config: BackupConfig) -> None:
        """Record *config*, keeping the list ordered newest first."""
        self.backup_configs.append(config)
        # Timestamps are fixed-width YYYYMMDDHHMMSS, so string order is time order
        self.backup_configs.sort(key=lambda c: c.timestamp, reverse=True)

    def find_backup_config(self, timestamp: str) -> BackupConfig | None:
        for config in self.backup_configs:
            if config.timestamp == timestamp:
                return config
        return None
