"""Display service for `gj list`"""
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from gj.constants import COLUMNS, STATUS_ACTIVE, STATUS_COLORS
from gj.core.engine import ListEntry
from gj.formatters import format_relative_time
from gj.logging_config import get_logger

logger = get_logger(__name__)


class DisplayService:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def build_row(self, entry: ListEntry, now: datetime) -> List[str]:
        age = format_relative_time(now, entry.created_at) if entry.created_at else "-"
        values = {
            "name": entry.name,
            "branch": entry.branch or "(detached)",
            "age": age,
            "status": entry.status,
        }
        return [values[col.key] for col in COLUMNS]

    def display_worktree_table(self, entries: List[ListEntry], now: datetime) -> None:
        """Print one row per worktree; inconsistent rows are highlighted."""
        table = Table(box=None, pad_edge=False)
        for col in COLUMNS:
            table.add_column(col.label, max_width=col.width or None, overflow="fold")

        for entry in entries:
            table.add_row(*self.build_row(entry, now), style=STATUS_COLORS.get(entry.status))

        self.console.print(table)

        problems = [e for e in entries if e.status != STATUS_ACTIVE]
        if problems:
            logger.debug(f"{len(problems)} worktrees out of sync with their state records")
            self.console.print(
                "[dim]missing = state record without directory, "
                "untracked = worktree directory without state record[/dim]"
            )
