"""Pydantic models for backup options and the per-run context."""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from db_backup.history.models import BackupConfig

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def new_timestamp() -> str:
    """Backup timestamp for a run starting now (``YYYYMMDDHHMMSS``)."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


# ============================================================================
# Options
# ============================================================================


class BackupOptions(BaseModel):
    """Resolved backup options, as read from ``backup.toml`` or the caller."""

    backup_dir: str = ""
    dbname: str
    plugin: str = ""
    from_timestamp: str | None = Field(default=None, pattern=r"^\d{14}$")
    incremental: bool = False
    leaf_partition_data: bool = False
    single_data_file: bool = False
    compressed: bool = True
    include_schemas: list[str] = Field(default_factory=list)
    exclude_schemas: list[str] = Field(default_factory=list)
    include_relations: list[str] = Field(default_factory=list)
    exclude_relations: list[str] = Field(default_factory=list)


# ============================================================================
# File Layout
# ============================================================================


class BackupPaths(BaseModel):
    """File locations of backup artifacts under a backup directory.

    Example:
        >>> paths = BackupPaths(backup_dir=Path("/data/backups"))
        >>> str(paths.toc_path("20240101120000"))
        '/data/backups/backups/20240101/20240101120000/gpbackup_20240101120000_toc.json'
    """

    backup_dir: Path

    @property
    def history_path(self) -> Path:
        return self.backup_dir / "gpbackup_history.json"

    def timestamp_dir(self, timestamp: str) -> Path:
        return self.backup_dir / "backups" / timestamp[:8] / timestamp

    def toc_path(self, timestamp: str) -> Path:
        return self.timestamp_dir(timestamp) / f"gpbackup_{timestamp}_toc.json"

    def metadata_path(self, timestamp: str) -> Path:
        return self.timestamp_dir(timestamp) / f"gpbackup_{timestamp}_metadata.sql"

    def segment_toc_path(self, content_id: int, timestamp: str) -> Path:
        return self.timestamp_dir(timestamp) / f"gpbackup_{content_id}_{timestamp}_toc.json"


# ============================================================================
# Run Context
# ============================================================================


class BackupContext(BaseModel):
    """Options and identity of the backup currently running.

    Passed explicitly to every operation that needs the run's
    configuration.
    """

    options: BackupOptions
    timestamp: str = Field(default_factory=new_timestamp)

    @property
    def paths(self) -> BackupPaths:
        return BackupPaths(backup_dir=Path(self.options.backup_dir))

    def current_config(self) -> BackupConfig:
        """Build the ``BackupConfig`` describing this run (without a restore plan)."""
        opts = self.options
        return BackupConfig(
            timestamp=self.timestamp,
            backup_dir=opts.backup_dir,
            database_name=opts.dbname,
            leaf_partition_data=opts.leaf_partition_data,
            plugin=opts.plugin,
            single_data_file=opts.single_data_file,
            compressed=opts.compressed,
            incremental=opts.incremental,
            include_schemas=list(opts.include_schemas),
            exclude_schemas=list(opts.exclude_schemas),
            include_relations=list(opts.include_relations),
            exclude_relations=list(opts.exclude_relations),
        )
