# File: localgov/services/storage.py
import logging
import os
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "uploads/issues"


def make_relative_path(issue_id: int | str, filename: str) -> str:
    """Storage reference kept in the DB; always forward slashes."""
    return f"{UPLOADS_PREFIX}/{issue_id}/{filename}"


class LocalDiskStorage:
    """Directory-per-issue namespace under ``root`` on the local filesystem."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def issue_dir(self, issue_id: int | str) -> Path:
        return self.root / UPLOADS_PREFIX / str(issue_id)

    def full_path(self, relative_path: str) -> Path:
        return self.root / relative_path

    def list_names(self, issue_id: int | str) -> set[str]:
        """Names already stored for this issue. Creates the directory if missing."""
        directory = self.issue_dir(issue_id)
        directory.mkdir(parents=True, exist_ok=True)
        return {entry.name for entry in directory.iterdir() if entry.is_file()}

    def open_exclusive(self, relative_path: str) -> BinaryIO:
        """Open a new file for writing; raises FileExistsError if the path is taken."""
        path = self.full_path(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        return open(path, "xb")

    def commit(self, handle: BinaryIO) -> None:
        """Push a finished write to disk before it is reported as stored."""
        handle.flush()
        os.fsync(handle.fileno())

    def delete(self, relative_path: str) -> bool:
        """Best-effort removal; never raises."""
        try:
            self.full_path(relative_path).unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.warning(f"Could not delete {relative_path}: {e}")
            return False

    def size(self, relative_path: str) -> int:
        return self.full_path(relative_path).stat().st_size
