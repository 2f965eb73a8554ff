"""Command-line argument parsing for gj."""

import argparse
from typing import Optional, Sequence

from gj.__version__ import __version__
from gj.constants import SHELL_WRAPPERS


def _add_no_cd(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-cd",
        action="store_true",
        help="Do not change directory, just report the created worktree",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gj",
        description="Manage temporary git worktree environments",
        epilog='Setup: add eval "$(gj shell-init zsh)" to your shell rc file so gj can change directory.',
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information and write ~/.gj/gj.log"
    )
    parser.add_argument("--version", action="version", version=f"gj {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    pr = subparsers.add_parser("pr", help="Create a worktree for reviewing a GitHub PR")
    pr.add_argument("number", type=int, help="PR number")
    _add_no_cd(pr)

    new = subparsers.add_parser("new", help="Create a new worktree for feature development")
    new.add_argument("suffix", nargs="?", help="Branch name (prompted interactively if not provided)")
    new.add_argument(
        "--random-suffix",
        action="store_true",
        help="Generate a random branch name instead of prompting",
    )
    _add_no_cd(new)

    checkout = subparsers.add_parser(
        "checkout", aliases=["co"], help="Create a worktree from a remote branch"
    )
    checkout.add_argument("remote_branch", help="Remote branch name (e.g., feature/foo or origin/main)")
    _add_no_cd(checkout)

    subparsers.add_parser("list", aliases=["ls"], help="List all managed worktrees")

    cd = subparsers.add_parser("cd", help="Change to a worktree directory")
    cd.add_argument("target", nargs="?", help="Worktree name, or '@' for the origin repository")

    exit_ = subparsers.add_parser(
        "exit", help="Clean up the current worktree and return to the origin repository"
    )
    exit_.add_argument(
        "-f", "--force", action="store_true", help="Remove even with uncommitted changes"
    )
    exit_.add_argument(
        "--merge",
        action="store_true",
        help="Merge the worktree branch into the default branch before removing it",
    )

    init = subparsers.add_parser("init", help="Create the gj configuration file")
    init.add_argument("-f", "--force", action="store_true", help="Overwrite an existing configuration file")

    shell_init = subparsers.add_parser("shell-init", help="Print the shell integration script")
    shell_init.add_argument("shell", help=f"Shell type ({', '.join(sorted(SHELL_WRAPPERS))})")

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    args = build_parser().parse_args(argv)
    # Normalise subcommand aliases
    args.command = {"co": "checkout", "ls": "list"}.get(args.command, args.command)
    return args
