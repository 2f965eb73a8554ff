"""Git-related services for gj."""

from .operations import GitOperations
from .worktrees import WorktreeService, parse_worktree_porcelain

__all__ = [
    "GitOperations",
    "WorktreeService",
    "parse_worktree_porcelain",
]
