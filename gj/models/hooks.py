"""Post-create hook models."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from gj.exceptions import HookError


@dataclass(frozen=True)
class CopyHook:
    """Copy a file from the origin repository into the new worktree."""

    source: str  # relative to the origin repository
    dest: Optional[str] = None  # relative to the worktree, defaults to source
    required: bool = False

    @property
    def target(self) -> str:
        return self.dest or self.source

    def describe(self) -> str:
        if self.target == self.source:
            return f"copy: {self.source}"
        return f"copy: {self.source} -> {self.target}"


@dataclass(frozen=True)
class RunHook:
    """Run a shell command inside the new worktree."""

    command: str

    def describe(self) -> str:
        return f"run: {self.command}"


Hook = Union[CopyHook, RunHook]


@dataclass
class HookResult:
    """Outcome of running a hook list.

    ``completed`` and ``skipped`` hold hook indexes; ``error`` is set when
    execution stopped at a failing hook.
    """

    completed: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    error: Optional[HookError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
