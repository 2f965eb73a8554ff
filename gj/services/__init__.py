"""Services used by the worktree engine."""

from .state_store import StateStore, path_hash
from .hook_runner import HookRunner

__all__ = ["StateStore", "path_hash", "HookRunner"]
