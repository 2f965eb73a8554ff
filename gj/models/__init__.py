"""Data models for gj."""

from .hooks import CopyHook, RunHook, Hook, HookResult
from .state import WorktreeState
from .worktree import WorktreeInfo

__all__ = ["CopyHook", "RunHook", "Hook", "HookResult", "WorktreeState", "WorktreeInfo"]
