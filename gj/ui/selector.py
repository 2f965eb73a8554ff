"""Worktree selector for `gj cd` without arguments, using Textual."""

from typing import List, Optional, Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, OptionList

from gj.logging_config import get_logger

logger = get_logger(__name__)


class WorktreeSelectorApp(App[Optional[int]]):
    """Full-screen list of worktrees; returns the chosen index, or None when cancelled.

    Textual draws on stderr, so the chosen path can still be printed to stdout.
    """

    TITLE = "gj"
    SUB_TITLE = "Select worktree"

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("q", "cancel", "Cancel", show=False),
    ]

    DEFAULT_CSS = """
    #worktrees {
        height: 1fr;
        border: round $primary;
    }
    """

    def __init__(self, labels: Sequence[str]):
        super().__init__()
        self.labels: List[str] = list(labels)

    def compose(self) -> ComposeResult:
        yield Header()
        yield OptionList(*self.labels, id="worktrees")
        yield Footer()

    def on_mount(self) -> None:
        option_list = self.query_one("#worktrees", OptionList)
        if self.labels:
            option_list.highlighted = 0
        option_list.focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        logger.debug(f"Selected worktree #{event.option_index}")
        self.exit(event.option_index)

    def action_cancel(self) -> None:
        self.exit(None)


def select_index(labels: Sequence[str]) -> Optional[int]:
    """Run the selector and return the index of the chosen label."""
    return WorktreeSelectorApp(labels).run()
