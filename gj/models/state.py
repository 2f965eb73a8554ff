"""Worktree state model."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict


def _utcnow() -> datetime:
    # JSON records keep microseconds out so timestamps stay readable
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass
class WorktreeState:
    """Persisted record of one gj-managed worktree."""

    worktree_path: Path
    origin_repo: Path
    branch: str
    created_at: datetime = field(default_factory=_utcnow)
    created_branch: bool = True  # False when an existing local branch was checked out

    def __post_init__(self):
        self.worktree_path = Path(self.worktree_path)
        self.origin_repo = Path(self.origin_repo)
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)

    @property
    def exists(self) -> bool:
        """Whether the worktree directory is still on disk."""
        return self.worktree_path.is_dir()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "worktree_path": str(self.worktree_path),
            "origin_repo": str(self.origin_repo),
            "branch": self.branch,
            "created_at": self.created_at.isoformat(),
            "created_branch": self.created_branch,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorktreeState":
        """Create a WorktreeState from a decoded JSON record.

        Raises:
            KeyError, ValueError, TypeError: if the record is incomplete or malformed
        """
        created_at = data["created_at"]
        if not isinstance(created_at, str):
            raise TypeError(f"created_at must be an ISO-8601 string, got {type(created_at).__name__}")
        if not isinstance(data["branch"], str):
            raise TypeError("branch must be a string")
        # Records written before created_branch existed always had a fresh branch
        created_branch = data.get("created_branch", True)
        if not isinstance(created_branch, bool):
            raise TypeError("created_branch must be a boolean")
        return cls(
            worktree_path=Path(data["worktree_path"]),
            origin_repo=Path(data["origin_repo"]),
            branch=data["branch"],
            created_at=datetime.fromisoformat(created_at.replace("Z", "+00:00")),
            created_branch=created_branch,
        )
