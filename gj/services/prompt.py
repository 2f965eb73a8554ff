"""Interactive and generated branch suffixes for `gj new`."""

import random
from typing import Optional

from rich.console import Console
from rich.prompt import Prompt

from gj.constants import ADJECTIVES, NOUNS


def prompt_for_suffix(console: Optional[Console] = None) -> str:
    """Ask for a branch name on the terminal.

    The prompt is drawn on stderr so stdout stays free for the worktree path.
    """
    console = console or Console(stderr=True)
    console.print("[dim]e.g., awesome-feature[/dim]")
    return Prompt.ask("Enter branch name", console=console)


def random_suffix(rng: Optional[random.Random] = None) -> str:
    """Generate a name like ``swift-falcon-42``."""
    rng = rng or random.Random()
    return f"{rng.choice(ADJECTIVES)}-{rng.choice(NOUNS)}-{rng.randint(10, 99)}"
