"""Worktree operations service for gj."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import git

from gj.exceptions import ExternalToolMissingError, GitOperationError
from gj.logging_config import get_logger
from gj.models.worktree import WorktreeInfo

logger = get_logger(__name__)


def command_error(operation: str, target: Optional[str], e: git.exc.GitCommandError) -> GitOperationError:
    """Translate a GitPython command failure into a GitOperationError."""
    stderr = (e.stderr if hasattr(e, "stderr") and e.stderr else str(e)).strip()
    status = e.status if hasattr(e, "status") else "unknown"

    if stderr:
        message = f"exit {status}: {stderr}"
    else:
        message = f"exit code {status}"
    return GitOperationError(operation, target, message)


def parse_worktree_porcelain(output: str) -> list[WorktreeInfo]:
    """Parse ``git worktree list --porcelain`` output.

    Format::

        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (blank line between worktrees)
    """
    worktree_list: list[WorktreeInfo] = []
    current: Dict[str, Any] = {}

    def flush():
        path = current.get("path", "")
        if path:
            worktree_list.append(
                WorktreeInfo(
                    path=path,
                    branch_name=current.get("branch", ""),
                    commit_sha=current.get("HEAD", ""),
                    is_main=current.get("is_main", False),
                    is_orphaned=not os.path.exists(path),
                )
            )

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            if current:
                flush()
                current = {}
            continue

        if line.startswith("worktree "):
            current["path"] = line.split(" ", 1)[1]
            # First worktree in list is always the main one
            current["is_main"] = not worktree_list
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith("refs/heads/"):
                current["branch"] = branch_ref[len("refs/heads/"):]
            else:
                current["branch"] = ""
        elif line.startswith("detached"):
            current["branch"] = ""

    # Last entry if no trailing blank line
    if current:
        flush()

    return worktree_list


class WorktreeService:
    """Service for adding, listing and removing linked worktrees of one repository."""

    def __init__(self, repo_path: str):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the origin repository
        """
        self.repo_path = str(repo_path)

    def _get_repo(self):
        """Get a git.Repo instance for the origin repository."""
        try:
            return git.Repo(self.repo_path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise GitOperationError("open_repository", self.repo_path, str(e)) from e

    def get_worktree_info(self) -> list[WorktreeInfo]:
        """Get detailed information about all worktrees of the repository."""
        repo = self._get_repo()
        try:
            output = repo.git.worktree("list", "--porcelain")
        except git.exc.GitCommandNotFound as e:
            raise ExternalToolMissingError("git") from e
        except git.exc.GitCommandError as e:
            raise command_error("worktree list", self.repo_path, e) from e

        worktree_list = parse_worktree_porcelain(output)
        logger.debug(f"Found {len(worktree_list)} worktrees")
        for wt in worktree_list:
            logger.debug(f"  {wt}")
        return worktree_list

    def add_worktree(
        self,
        path: Path,
        branch: str,
        new_branch: bool = False,
        start_point: Optional[str] = None,
        track: bool = False,
    ) -> None:
        """Create a worktree at ``path``.

        Args:
            path: Directory to create
            branch: Branch to check out (created first when new_branch is True)
            new_branch: Create ``branch`` (``-b``) instead of checking out an existing one
            start_point: Commit-ish the new branch starts from (defaults to HEAD)
            track: Set the start point as the upstream of the new branch
        """
        args = ["add"]
        if new_branch:
            if track:
                args.append("--track")
            args.extend(["-b", branch, str(path)])
            if start_point:
                args.append(start_point)
        else:
            args.extend([str(path), branch])

        repo = self._get_repo()
        try:
            repo.git.worktree(*args)
        except git.exc.GitCommandNotFound as e:
            raise ExternalToolMissingError("git") from e
        except git.exc.GitCommandError as e:
            raise command_error("worktree add", str(path), e) from e
        logger.info(f"Created worktree at {path} on branch {branch}")

    def remove_worktree(self, path: Path, force: bool = False) -> None:
        """Remove the worktree at ``path``.

        Args:
            path: Path to the worktree directory
            force: Remove even if the working tree is dirty or locked
        """
        args = ["remove", str(path)]
        if force:
            args.append("--force")

        repo = self._get_repo()
        try:
            repo.git.worktree(*args)
        except git.exc.GitCommandNotFound as e:
            raise ExternalToolMissingError("git") from e
        except git.exc.GitCommandError as e:
            raise command_error("worktree remove", str(path), e) from e
        logger.info(f"Removed worktree at {path}")

    def get_worktree_status_details(self, worktree_path: Path) -> dict:
        """Get file status flags of a worktree.

        Returns:
            Dict with 'modified', 'untracked', 'staged' boolean flags
        """
        repo = self._get_repo()
        try:
            status = repo.git.execute(["git", "-C", str(worktree_path), "status", "--porcelain"])
        except git.exc.GitCommandNotFound as e:
            raise ExternalToolMissingError("git") from e
        except git.exc.GitCommandError as e:
            raise command_error("status", str(worktree_path), e) from e

        # Porcelain format: XY filename
        # X = index status, Y = working tree status
        has_modified = False
        has_untracked = False
        has_staged = False

        for line in status.split("\n"):
            if len(line) < 2:
                continue

            if line.startswith("??"):
                has_untracked = True
                continue

            if line[0] != " ":
                has_staged = True
            if line[1] != " ":
                has_modified = True

        return {
            "modified": has_modified,
            "untracked": has_untracked,
            "staged": has_staged,
        }
