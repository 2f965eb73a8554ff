"""
gj - Disposable git worktrees for pull requests and features
"""

import os

# Let a missing git executable surface as a command error instead of an import failure
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from .__version__ import __version__  # noqa: E402
from .core import WorktreeEngine  # noqa: E402
from .cli.main import main  # noqa: E402

__all__ = ["WorktreeEngine", "main", "__version__"]
