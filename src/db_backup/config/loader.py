"""Load backup options from a TOML file."""

import tomllib
from pathlib import Path

from db_backup.config.models import BackupOptions


def load_backup_options(config_path: Path | None = None) -> BackupOptions:
    """Load backup options from the ``[backup]`` table of a TOML file.

    Args:
        config_path: Path to backup.toml (default: ./backup.toml)

    Returns:
        BackupOptions with every option resolved

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid

    Example:
        # backup.toml
        # [backup]
        # dbname = "sales"
        # backup_dir = "/data/backups"
        # incremental = true
        # include_schemas = ["public"]
        options = load_backup_options(Path("backup.toml"))
    """
    if config_path is None:
        config_path = Path.cwd() / "backup.toml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"Backup config not found: {config_path}\n"
            f"Create it with a [backup] table containing at least 'dbname'."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path.name}: {e}") from e

    if "backup" not in data:
        raise ValueError(f"No [backup] table in {config_path.name}")

    # pydantic.ValidationError is a ValueError
    return BackupOptions(**data["backup"])
