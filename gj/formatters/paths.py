"""Branch and worktree naming."""

from datetime import datetime
from pathlib import Path
from typing import Iterable

from gj.constants import DEFAULT_REMOTE


def sanitize_name(name: str) -> str:
    """Make user input safe as a directory name and a ref component.

    Anything other than alphanumerics, '-' and '_' becomes '-'.
    """
    return "".join(c if c.isalnum() or c in "-_" else "-" for c in name.strip())


def feature_branch_name(prefix: str, slug: str, when: datetime) -> str:
    """``<prefix>/<YYYYMMDD>_<slug>``"""
    return f"{prefix}/{when:%Y%m%d}_{slug}"


def strip_remote_prefix(branch: str) -> str:
    """Drop a leading ``origin/`` from a remote branch name."""
    prefix = f"{DEFAULT_REMOTE}/"
    if branch.startswith(prefix):
        return branch[len(prefix):]
    return branch


def display_name(path: Path, base_dirs: Iterable[Path] = ()) -> str:
    """Short name of a worktree: its path relative to a base dir, else the last two segments.

    Example: ~/.gj/worktrees/my_repo/pr-123 -> my_repo/pr-123
    """
    path = Path(path)
    for base in base_dirs:
        try:
            return path.relative_to(base).as_posix()
        except ValueError:
            continue
    return "/".join(path.parts[-2:])
