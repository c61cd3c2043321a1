"""JSON persistence for TOC, segment TOC, and history artifacts.

Artifacts are pydantic models written as indented JSON. Writes go to a
temporary file in the target directory and are moved into place with
``os.replace``, so a failed write never leaves a half-written artifact
behind and the previous version stays intact.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from db_backup.errors import ArtifactError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

READ_ONLY_MODE = 0o444


def write_artifact(model: BaseModel, path: str | Path, read_only: bool = False) -> None:
    """Serialize *model* to *path* atomically.

    Args:
        model: Artifact to persist.
        path: Destination file. Parent directories are created.
        read_only: When ``True``, the finished file is chmod ``0444``.

    Raises:
        ArtifactError: If the file cannot be written.
    """
    path = Path(path)
    contents = model.model_dump_json(indent=2)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(contents)
                f.write("\n")
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        if read_only:
            os.chmod(path, READ_ONLY_MODE)
    except OSError as e:
        raise ArtifactError(str(path), f"Unable to write {type(model).__name__}") from e

    logger.info(f"Wrote {type(model).__name__} to {path}")


def read_artifact(path: str | Path, model_cls: type[ModelT]) -> ModelT:
    """Load and validate an artifact of type *model_cls* from *path*.

    Raises:
        ArtifactError: If the file is missing, unreadable, or malformed.
    """
    try:
        contents = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ArtifactError(str(path), f"Invalid {model_cls.__name__} file") from e
    except OSError as e:
        raise ArtifactError(str(path), f"Unable to read {model_cls.__name__}") from e

    try:
        model = model_cls.model_validate_json(contents)
    except ValidationError as e:
        raise ArtifactError(str(path), f"Invalid {model_cls.__name__} file") from e

    logger.debug(f"Loaded {model_cls.__name__} from {path}")
    return model
