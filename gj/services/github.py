"""Pull request lookup: map a PR number to its head branch."""

import os
import subprocess
from typing import Optional, TYPE_CHECKING
from urllib.parse import urlparse

from github import Auth, Github, GithubException

from gj.exceptions import ConfigError, ExternalToolMissingError, PrNotFoundError
from gj.logging_config import get_logger

if TYPE_CHECKING:
    from gj.config import GlobalConfig
    from gj.services.git import GitOperations

logger = get_logger(__name__)


def parse_github_repo(remote_url: str) -> str:
    """Extract ``owner/repo`` from an SSH or HTTPS GitHub remote URL."""
    if remote_url.startswith("git@"):
        # SSH URL format (git@github.com:org/repo.git)
        path = remote_url.split(":", 1)[1]
    else:
        # HTTPS URL format (https://github.com/org/repo.git)
        path = urlparse(remote_url).path.strip("/")

    if path.endswith(".git"):
        path = path[:-4]

    if path.count("/") != 1:
        raise ValueError(f"Cannot determine GitHub repository from remote URL: {remote_url}")
    return path


class GhCliResolver:
    """Resolves PR head branches through the ``gh`` CLI."""

    def __init__(self, repo_path: str, executable: str = "gh"):
        self.repo_path = str(repo_path)
        self.executable = executable

    def resolve(self, number: int) -> str:
        """Return the head ref name of PR ``number``.

        Raises:
            ExternalToolMissingError: if gh is not installed
            PrNotFoundError: if gh fails or reports no branch
        """
        cmd = [self.executable, "pr", "view", str(number), "--json", "headRefName", "-q", ".headRefName"]
        logger.debug(f"Running {' '.join(cmd)} in {self.repo_path}")
        try:
            completed = subprocess.run(cmd, cwd=self.repo_path, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ExternalToolMissingError(
                self.executable, "Please install it from https://cli.github.com/"
            ) from e

        if completed.returncode != 0:
            raise PrNotFoundError(number, completed.stderr.strip() or None)

        branch = completed.stdout.strip()
        if not branch:
            raise PrNotFoundError(number)
        return branch


class GitHubApiResolver:
    """Resolves PR head branches through the GitHub REST API."""

    def __init__(self, github_repo: str, token: str, github: Optional[Github] = None):
        """Initialize the resolver.

        Args:
            github_repo: ``owner/repo`` of the origin repository
            token: GitHub token used for authentication
            github: Pre-built client (tests)
        """
        self.github_repo = github_repo
        self.github = github or Github(auth=Auth.Token(token))

    def resolve(self, number: int) -> str:
        try:
            pull = self.github.get_repo(self.github_repo).get_pull(number)
        except GithubException as e:
            logger.debug(f"[GitHub] Failed to fetch PR #{number} from {self.github_repo}: {e}")
            raise PrNotFoundError(number, f"GitHub API returned {e.status}") from e

        branch = pull.head.ref if pull.head else None
        if not branch:
            raise PrNotFoundError(number)
        return branch


def make_pr_resolver(config: "GlobalConfig", git_ops: "GitOperations"):
    """Build the resolver selected by ``default.pr_resolver``."""
    if config.default.pr_resolver == "api":
        token = config.default.github_token or os.environ.get("GITHUB_TOKEN")
        if not token:
            raise ConfigError(
                "pr_resolver = \"api\" requires github_token in config.toml or the GITHUB_TOKEN environment variable"
            )
        try:
            github_repo = parse_github_repo(git_ops.remote_url())
        except ValueError as e:
            raise ConfigError(str(e)) from e
        return GitHubApiResolver(github_repo, token)

    return GhCliResolver(git_ops.repo_path)
