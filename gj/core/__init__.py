"""Core worktree lifecycle."""

from .engine import WorktreeEngine, CreatedWorktree, ListEntry, BranchPlan

__all__ = ["WorktreeEngine", "CreatedWorktree", "ListEntry", "BranchPlan"]
