"""State store for gj-managed worktree records."""
import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from gj.constants import state_dir
from gj.exceptions import StateRecordError
from gj.logging_config import get_logger
from gj.models.state import WorktreeState

logger = get_logger(__name__)


def path_hash(path: os.PathLike | str) -> str:
    """Stable 16-hex-character key for a worktree path."""
    return hashlib.sha256(str(path).encode()).hexdigest()[:16]


class StateStore:
    """Persists one JSON file per worktree, named by the hash of its path."""

    def __init__(self, directory: Optional[Path] = None):
        """Initialize the store.

        Args:
            directory: Directory holding the records (defaults to ~/.gj/state)
        """
        self.directory = Path(directory) if directory is not None else state_dir()

    def _key_path(self, worktree_path: os.PathLike | str) -> Path:
        canonical = Path(worktree_path).expanduser().resolve()
        return self.directory / f"{path_hash(canonical)}.json"

    def put(self, state: WorktreeState) -> None:
        """Write a record atomically: readers see the old file or the new one, never a mix."""
        self.directory.mkdir(parents=True, exist_ok=True)
        record_file = self._key_path(state.worktree_path)

        fd, temp_name = tempfile.mkstemp(dir=self.directory, prefix=".", suffix=".tmp")
        temp_file = Path(temp_name)
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(state.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            temp_file.replace(record_file)
            logger.debug(f"Saved state for {state.worktree_path} to {record_file.name}")
        finally:
            if temp_file.exists():
                temp_file.unlink()

    def get(self, worktree_path: os.PathLike | str) -> Optional[WorktreeState]:
        """Return the record for ``worktree_path`` or None when there is none.

        Raises:
            StateRecordError: if the record exists but cannot be read or decoded
        """
        record_file = self._key_path(worktree_path)
        if not record_file.exists():
            return None
        try:
            return self._read(record_file)
        except (OSError, ValueError) as e:
            raise StateRecordError(record_file, str(e)) from e

    def delete(self, worktree_path: os.PathLike | str) -> bool:
        """Remove the record for ``worktree_path``. Returns False if none existed."""
        record_file = self._key_path(worktree_path)
        try:
            record_file.unlink()
        except FileNotFoundError:
            logger.debug(f"No state record for {worktree_path}, nothing to delete")
            return False
        logger.debug(f"Deleted state for {worktree_path}")
        return True

    def list_all(self) -> List[WorktreeState]:
        """Read every record, newest first. Unreadable files are skipped with a warning."""
        if not self.directory.is_dir():
            return []

        states = []
        for record_file in sorted(self.directory.glob("*.json")):
            try:
                states.append(self._read(record_file))
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable state file {record_file}: {e}")

        states.sort(key=lambda s: s.created_at, reverse=True)
        return states

    @staticmethod
    def _read(record_file: Path) -> WorktreeState:
        with open(record_file, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("state record is not a JSON object")
        try:
            return WorktreeState.from_dict(data)
        except (KeyError, TypeError) as e:
            raise ValueError(f"invalid state record: {e!r}") from e
