"""Post-create hook execution."""
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from gj.exceptions import HookCommandFailedError, HookError, MissingRequiredFileError
from gj.logging_config import get_logger
from gj.models.hooks import CopyHook, Hook, HookResult, RunHook

logger = get_logger(__name__)

# Hook commands print to our stderr; stdout is reserved for the path handed to the shell
STDERR_FD = 2


class HookRunner:
    """Runs post-create hooks in order, stopping at the first failure."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def run(self, hooks: Sequence[Hook], origin_repo: Path, worktree: Path) -> HookResult:
        """Execute ``hooks`` against a freshly created worktree.

        Args:
            hooks: Ordered hooks (default hooks first, then repository hooks)
            origin_repo: Origin repository, base for copy sources
            worktree: Worktree root, base for copy destinations and run cwd

        Returns:
            HookResult; ``error`` names the failing hook when execution stopped early
        """
        result = HookResult()
        for index, hook in enumerate(hooks):
            try:
                if isinstance(hook, CopyHook):
                    copied = self._run_copy(index, hook, Path(origin_repo), Path(worktree))
                    if not copied:
                        result.skipped.append(index)
                        continue
                elif isinstance(hook, RunHook):
                    self._run_command(index, hook, Path(worktree))
                else:
                    raise TypeError(f"Unsupported hook type: {type(hook).__name__}")
            except HookError as e:
                logger.error(str(e))
                result.error = e
                return result
            result.completed.append(index)

        logger.info(f"Ran {len(result.completed)} hooks ({len(result.skipped)} skipped)")
        return result

    def _run_copy(self, index: int, hook: CopyHook, origin_repo: Path, worktree: Path) -> bool:
        """Copy one file or directory. Returns False when an optional source is absent."""
        source = origin_repo / hook.source
        dest = worktree / hook.target

        if not source.exists():
            if hook.required:
                raise MissingRequiredFileError(index, hook.describe(), source)
            logger.info(f"Skipping optional copy, {source} does not exist")
            return False

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            if source.is_dir():
                shutil.copytree(source, dest, dirs_exist_ok=True)
            else:
                shutil.copy2(source, dest)
        except OSError as e:
            raise HookError(index, hook.describe(), f"Failed to copy {source} to {dest}: {e}") from e

        self.console.print(f"[dim]Copied:[/dim] {hook.source} -> {hook.target}")
        return True

    def _run_command(self, index: int, hook: RunHook, worktree: Path) -> None:
        self.console.print(f"[dim]Running:[/dim] {hook.command}")
        try:
            completed = subprocess.run(
                hook.command,
                shell=True,
                cwd=worktree,
                stdout=STDERR_FD,
            )
        except OSError as e:
            raise HookError(index, hook.describe(), f"Failed to execute command: {e}") from e

        if completed.returncode != 0:
            raise HookCommandFailedError(index, hook.describe(), completed.returncode)
