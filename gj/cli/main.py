"""Command-line entry point for gj.

stdout carries only the directory the shell wrapper should change into
(or the output of `list` / `shell-init`); everything else goes to stderr.
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape

from gj.cli.args import parse_args
from gj.config import ConfigStore
from gj.constants import SHELL_WRAPPERS
from gj.core.engine import CreatedWorktree, WorktreeEngine
from gj.exceptions import GjError, UnsupportedShellError
from gj.logging_config import get_logger, setup_logging
from gj.services.display_service import DisplayService
from gj.services.state_store import StateStore

console = Console(stderr=True, soft_wrap=True)
logger = get_logger(__name__)


def build_engine() -> WorktreeEngine:
    return WorktreeEngine(ConfigStore(), StateStore(), console=console)


def emit_path(path: Path) -> None:
    """Write the target directory for the shell wrapper."""
    print(str(path))


def report_created(created: CreatedWorktree, no_cd: bool) -> int:
    if not created.hook_result.ok:
        console.print(f"[red]Error: {escape(str(created.hook_result.error))}[/red]")
        console.print(
            f"[yellow]The worktree was kept at {escape(str(created.path))} "
            f"(branch {escape(created.branch)}). Fix the problem there or run `gj exit --force`.[/yellow]"
        )
        return 1

    if no_cd:
        console.print(f"Worktree created at: {escape(str(created.path))}")
        console.print(f"Branch: {escape(created.branch)}")
        return 0

    console.print(f"[green]Created worktree[/green] {escape(str(created.path))} ({escape(created.branch)})")
    emit_path(created.path)
    return 0


def cmd_pr(engine: WorktreeEngine, args: argparse.Namespace) -> int:
    return report_created(engine.create_for_pr(Path.cwd(), args.number), args.no_cd)


def cmd_new(engine: WorktreeEngine, args: argparse.Namespace) -> int:
    created = engine.create_new(Path.cwd(), args.suffix, use_random_suffix=args.random_suffix)
    return report_created(created, args.no_cd)


def cmd_checkout(engine: WorktreeEngine, args: argparse.Namespace) -> int:
    return report_created(engine.create_from_remote(Path.cwd(), args.remote_branch), args.no_cd)


def cmd_list(engine: WorktreeEngine, args: argparse.Namespace) -> int:
    entries = engine.list_entries()
    if not entries:
        console.print("No managed worktrees found.")
        return 0
    DisplayService().display_worktree_table(entries, datetime.now(timezone.utc))
    return 0


def cmd_cd(engine: WorktreeEngine, args: argparse.Namespace) -> int:
    target = engine.cd_target(Path.cwd(), args.target)
    if target is None:
        console.print("[yellow]Selection cancelled[/yellow]")
        return 1
    emit_path(target)
    return 0


def cmd_exit(engine: WorktreeEngine, args: argparse.Namespace) -> int:
    origin = engine.exit_worktree(Path.cwd(), force=args.force, merge=args.merge)
    console.print(f"[green]Removed worktree[/green], returning to {escape(str(origin))}")
    emit_path(origin)
    return 0


def cmd_init(engine: WorktreeEngine, args: argparse.Namespace) -> int:
    path = engine.config_store.write_template(force=args.force)
    engine.state_store.directory.mkdir(parents=True, exist_ok=True)
    console.print(f"Created configuration file at {escape(str(path))}")
    console.print("\nEdit this file to configure your repositories and hooks.")
    return 0


def cmd_shell_init(engine: WorktreeEngine, args: argparse.Namespace) -> int:
    script = SHELL_WRAPPERS.get(args.shell)
    if script is None:
        raise UnsupportedShellError(args.shell, sorted(SHELL_WRAPPERS))
    sys.stdout.write(script)
    return 0


COMMANDS = {
    "pr": cmd_pr,
    "new": cmd_new,
    "checkout": cmd_checkout,
    "list": cmd_list,
    "cd": cmd_cd,
    "exit": cmd_exit,
    "init": cmd_init,
    "shell-init": cmd_shell_init,
}


def main(argv: Optional[Sequence[str]] = None, engine: Optional[WorktreeEngine] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)
        logger.debug(f"Running command {parsed_args.command}")

        engine = engine or build_engine()
        return COMMANDS[parsed_args.command](engine, parsed_args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 130
    except GjError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1
    except Exception as e:
        console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


def run() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
