"""Custom exceptions for gj"""

from pathlib import Path
from typing import Optional, Sequence, Union


class GjError(Exception):
    """Base exception for all gj errors."""
    pass


class GitOperationError(GjError):
    """Exception raised when a git command exits with a failure."""

    def __init__(self, operation: str, target: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.target = target
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if target:
            error_msg += f" for '{target}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class ExternalToolMissingError(GjError):
    """Exception raised when git or gh cannot be executed."""

    def __init__(self, tool: str, hint: Optional[str] = None):
        self.tool = tool
        error_msg = f"'{tool}' executable not found"
        if hint:
            error_msg += f". {hint}"
        super().__init__(error_msg)


class NotAGitRepoError(GjError):
    """Exception raised when the working directory is not inside a git repository."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Not in a git repository: {path}")


class ConfigError(GjError):
    """Base exception for configuration problems."""
    pass


class ConfigParseError(ConfigError):
    """Exception raised when the configuration file is malformed."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        super().__init__(f"Failed to parse config file {path}: {message}")


class ConfigNotFoundError(ConfigError):
    """Exception raised when no configuration file exists."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(
            f"Configuration file not found at {path}. Run `gj init` to create one."
        )


class DuplicateRepoPathError(ConfigError):
    """Exception raised when two repository entries point at the same path."""

    def __init__(self, path: Union[str, Path], aliases: Sequence[str]):
        self.path = Path(path)
        self.aliases = list(aliases)
        super().__init__(
            f"Repository path {path} is registered more than once "
            f"(repos.{', repos.'.join(self.aliases)}). Remove the duplicates from the config file."
        )


class NotRegisteredError(GjError):
    """Exception raised when the current repository has no config entry."""

    def __init__(self, repo_root: Union[str, Path], config_path: Union[str, Path]):
        self.repo_root = Path(repo_root)
        self.config_path = Path(config_path)
        super().__init__(
            f"Repository {repo_root} is not registered. Add a [repos.<name>] section "
            f'with path = "{repo_root}" to {config_path}.'
        )


class WorktreeExistsError(GjError):
    """Exception raised when the target worktree directory already exists."""

    def __init__(self, path: Union[str, Path], name: str):
        self.path = Path(path)
        self.name = name
        super().__init__(f"Worktree already exists at {path}. Use `gj cd {name}` to switch to it.")


class WorktreeNotFoundError(GjError):
    """Exception raised when no managed worktree matches a name."""
    pass


class AmbiguousWorktreeError(GjError):
    """Exception raised when a name matches more than one managed worktree."""

    def __init__(self, name: str, candidates: Sequence[str]):
        self.name = name
        self.candidates = list(candidates)
        listing = "\n".join(f"  - {c}" for c in self.candidates)
        super().__init__(f"Multiple worktrees match '{name}'. Please be more specific:\n{listing}")


class PrNotFoundError(GjError):
    """Exception raised when a pull request number cannot be resolved to a branch."""

    def __init__(self, number: int, message: Optional[str] = None):
        self.number = number
        error_msg = f"PR #{number} not found or has no branch"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)


class NotAWorktreeError(GjError):
    """Exception raised when the working directory is not a gj-managed worktree."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(
            f"Not in a gj-managed worktree ({path}). "
            "Use this command inside a worktree created by gj."
        )


class DirtyWorktreeError(GjError):
    """Exception raised when exiting a worktree that has uncommitted changes."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(
            "Worktree has uncommitted changes. "
            "Use --force to discard them, or commit/stash first."
        )


class MergeConflictError(GjError):
    """Exception raised when merging a worktree branch back into the default branch fails."""

    def __init__(self, branch: str, target: str, message: Optional[str] = None):
        self.branch = branch
        self.target = target
        error_msg = f"Merging '{branch}' into '{target}' failed; the merge was aborted and the worktree kept"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)


class HookError(GjError):
    """Exception raised when a post-create hook fails."""

    def __init__(self, index: int, description: str, message: str):
        self.index = index
        self.description = description
        self.message = message
        super().__init__(f"Hook #{index + 1} ({description}) failed: {message}")


class MissingRequiredFileError(HookError):
    """Exception raised when a required copy hook source does not exist."""

    def __init__(self, index: int, description: str, source: Union[str, Path]):
        self.source = Path(source)
        super().__init__(index, description, f"Required file not found: {source} (from origin repo)")


class HookCommandFailedError(HookError):
    """Exception raised when a run hook exits with a non-zero status."""

    def __init__(self, index: int, description: str, returncode: int):
        self.returncode = returncode
        super().__init__(index, description, f"command exited with status {returncode}")


class UnsupportedShellError(GjError):
    """Exception raised for shells without a wrapper template."""

    def __init__(self, shell: str, supported: Sequence[str]):
        self.shell = shell
        super().__init__(f"Unsupported shell: {shell}. Supported shells: {', '.join(supported)}")


class InvalidNameError(GjError):
    """Exception raised for an empty or unusable branch name."""
    pass


class StateRecordError(GjError):
    """Exception raised when a worktree state record cannot be read."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        super().__init__(
            f"Corrupt state record {path}: {message}. "
            "Delete the file to stop gj from tracking this worktree."
        )
