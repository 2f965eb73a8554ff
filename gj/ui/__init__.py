"""Interactive terminal UI for gj."""

from .selector import WorktreeSelectorApp, select_index

__all__ = ["WorktreeSelectorApp", "select_index"]
