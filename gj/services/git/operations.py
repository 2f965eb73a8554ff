"""Git operations service"""

from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import git

from gj.constants import DEFAULT_REMOTE
from gj.exceptions import ExternalToolMissingError, GitOperationError, NotAGitRepoError
from gj.logging_config import get_logger
from gj.models.worktree import WorktreeInfo
from gj.services.git.worktrees import WorktreeService, command_error

logger = get_logger(__name__)


class GitOperations:
    """Version-control operations against one repository or worktree directory.

    Every failing git command surfaces as GitOperationError; a missing git
    executable surfaces as ExternalToolMissingError.
    """

    def __init__(self, repo_path: str | Path):
        """Initialize the service.

        Args:
            repo_path: Directory to run git in (origin repository or worktree)
        """
        self.repo_path = str(repo_path)
        self.remote_name = DEFAULT_REMOTE
        self.worktree_service = WorktreeService(self.repo_path)

    def _get_repo(self):
        """Get a git.Repo instance for ``repo_path``.

        GitPython repos are lightweight - they don't clone, just open the existing repo.
        """
        try:
            return git.Repo(self.repo_path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise NotAGitRepoError(self.repo_path) from e

    @contextmanager
    def _git_operation(self, operation: str, target: Optional[str] = None):
        """Translate GitPython failures raised inside the block."""
        try:
            yield
        except git.exc.GitCommandNotFound as e:
            raise ExternalToolMissingError("git", "Install git and make sure it is on PATH.") from e
        except git.exc.GitCommandError as e:
            raise command_error(operation, target, e) from e

    def toplevel(self) -> Path:
        """Return the root of the working tree containing ``repo_path``.

        Raises:
            NotAGitRepoError: if ``repo_path`` is not inside a git working tree
        """
        if not Path(self.repo_path).is_dir():
            raise NotAGitRepoError(self.repo_path)
        try:
            output = git.Git(self.repo_path).rev_parse("--show-toplevel")
        except git.exc.GitCommandNotFound as e:
            raise ExternalToolMissingError("git", "Install git and make sure it is on PATH.") from e
        except git.exc.GitCommandError as e:
            raise NotAGitRepoError(self.repo_path) from e

        root = output.strip()
        if not root:
            raise NotAGitRepoError(self.repo_path)
        return Path(root).resolve()

    def remote_url(self) -> str:
        repo = self._get_repo()
        with self._git_operation("remote get-url", self.remote_name):
            return repo.git.remote("get-url", self.remote_name).strip()

    def branch_exists(self, branch_name: str) -> bool:
        """Check whether a local branch exists."""
        repo = self._get_repo()
        try:
            with self._git_operation("rev-parse", branch_name):
                repo.git.rev_parse("--verify", "--quiet", f"refs/heads/{branch_name}")
        except GitOperationError:
            return False
        return True

    def current_branch(self) -> Optional[str]:
        """Name of the checked-out branch, or None for a detached HEAD."""
        repo = self._get_repo()
        try:
            return repo.active_branch.name
        except TypeError:
            return None

    def fetch_branch(self, branch_name: str) -> None:
        """Fetch one branch from origin, updating ``origin/<branch>``."""
        repo = self._get_repo()
        with self._git_operation("fetch", branch_name):
            repo.git.fetch(self.remote_name, branch_name)
        logger.info(f"Fetched {self.remote_name}/{branch_name}")

    def fetch_ref(self, refspec: str) -> None:
        """Fetch an arbitrary refspec from origin (e.g. ``pull/12/head:feature``)."""
        repo = self._get_repo()
        with self._git_operation("fetch", refspec):
            repo.git.fetch(self.remote_name, refspec)
        logger.info(f"Fetched {self.remote_name} {refspec}")

    def get_default_branch(self) -> str:
        """Default branch: origin/HEAD, then main, then master."""
        repo = self._get_repo()
        try:
            with self._git_operation("symbolic-ref", "origin/HEAD"):
                ref_name = repo.git.symbolic_ref(f"refs/remotes/{self.remote_name}/HEAD").strip()
            prefix = f"refs/remotes/{self.remote_name}/"
            if ref_name.startswith(prefix):
                return ref_name[len(prefix):]
        except GitOperationError:
            logger.debug("origin/HEAD is not set, falling back to main/master")

        for candidate in ("main", "master"):
            if self.branch_exists(candidate):
                return candidate

        raise GitOperationError(
            "default_branch", message="Could not determine default branch. Neither 'main' nor 'master' exists."
        )

    def checkout(self, branch_name: str) -> None:
        repo = self._get_repo()
        with self._git_operation("checkout", branch_name):
            repo.git.checkout(branch_name)

    def merge(self, branch_name: str) -> None:
        """Merge ``branch_name`` into the checked-out branch."""
        repo = self._get_repo()
        with self._git_operation("merge", branch_name):
            repo.git.merge(branch_name, "--no-edit")
        logger.info(f"Merged {branch_name} in {self.repo_path}")

    def merge_abort(self) -> None:
        """Abort an in-progress merge; a no-op when nothing is being merged."""
        repo = self._get_repo()
        try:
            with self._git_operation("merge --abort"):
                repo.git.merge("--abort")
        except GitOperationError as e:
            logger.debug(f"Nothing to abort: {e}")

    def delete_branch(self, branch_name: str, force: bool = False) -> bool:
        """Delete a local branch. Remote branches are never touched.

        Returns:
            True if the branch was deleted; failures are logged as warnings
        """
        repo = self._get_repo()
        try:
            with self._git_operation("branch delete", branch_name):
                repo.git.branch("-D" if force else "-d", branch_name)
        except GitOperationError as e:
            logger.warning(f"Could not delete branch {branch_name}: {e}")
            return False
        logger.info(f"Deleted local branch {branch_name}")
        return True

    def has_uncommitted_changes(self) -> bool:
        """Whether the working tree at ``repo_path`` has staged, modified or untracked files."""
        details = self.worktree_service.get_worktree_status_details(Path(self.repo_path))
        return any(details.values())

    def add_worktree(
        self,
        path: Path,
        branch: str,
        new_branch: bool = False,
        start_point: Optional[str] = None,
        track: bool = False,
    ) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.worktree_service.add_worktree(path, branch, new_branch, start_point, track)

    def remove_worktree(self, path: Path, force: bool = False) -> None:
        self.worktree_service.remove_worktree(path, force)

    def list_worktrees(self) -> list[WorktreeInfo]:
        return self.worktree_service.get_worktree_info()
