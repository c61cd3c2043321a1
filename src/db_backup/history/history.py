"""Load and commit the backup history file.

The history is read wholesale before an incremental backup and rewritten
once after each successful backup. The rewrite is atomic: either the
whole new history (with its updated restore plans) lands on disk or the
previous file is left untouched.
"""

import logging
from pathlib import Path

from db_backup.artifacts import read_artifact, write_artifact
from db_backup.history.models import History

logger = logging.getLogger(__name__)


def load_history(path: str | Path, missing_ok: bool = True) -> History:
    """Load the history file at *path*.

    Args:
        path: History file location.
        missing_ok: When ``True`` (default), a missing file yields an empty
            ``History`` -- no backups have been taken yet.

    Raises:
        ArtifactError: If the file exists but cannot be read or parsed, or
            is missing and *missing_ok* is ``False``.
    """
    path = Path(path)
    if missing_ok and not path.exists():
        logger.info(f"No backup history at {path}")
        return History()
    return read_artifact(path, History)


def write_history(history: History, path: str | Path) -> None:
    """Atomically replace the history file at *path* with *history*."""
    write_artifact(history, path)
