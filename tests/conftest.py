"""Pytest fixtures for gj tests"""
import io
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import git
import pytest
from rich.console import Console

from gj.config import ConfigStore
from gj.core.engine import WorktreeEngine
from gj.services.hook_runner import HookRunner
from gj.services.state_store import StateStore

FIXED_NOW = datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc)


def init_repo(path: Path) -> git.Repo:
    """Initialize a repository with one commit on main."""
    path.mkdir(parents=True)
    repo = git.Repo.init(path)

    # Configure git user for commits
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")

    test_file = path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch("-M", "main")
    return repo


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def gj_home(temp_dir, monkeypatch):
    """Point GJ_HOME at an empty directory."""
    home = temp_dir / "gj-home"
    home.mkdir()
    monkeypatch.setenv("GJ_HOME", str(home))
    return home


@pytest.fixture
def remote_repo(temp_dir):
    """Create a bare repository acting as origin."""
    remote = git.Repo.init(temp_dir / "remote.git", bare=True)
    yield remote
    remote.close()


@pytest.fixture
def git_repo(temp_dir, remote_repo):
    """Create a real Git repository with main pushed to a bare origin."""
    repo = init_repo(temp_dir / "demo")
    repo.create_remote("origin", remote_repo.git_dir)
    repo.git.push("origin", "main")
    yield repo
    repo.close()


@pytest.fixture
def worktrees_dir(temp_dir):
    return temp_dir / "worktrees"


@pytest.fixture
def write_config(gj_home):
    """Write config.toml into GJ_HOME and return its path."""

    def _write(text: str) -> Path:
        path = gj_home / "config.toml"
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def registered_repo(git_repo, worktrees_dir, write_config):
    """The git_repo fixture registered as repos.demo, without hooks."""
    write_config(
        f"""
[default]
base_dir = "{worktrees_dir}"

[repos.demo]
path = "{git_repo.working_tree_dir}"
"""
    )
    return git_repo


@pytest.fixture
def console():
    """A console writing into a buffer."""
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def make_engine(gj_home, console):
    """Build an engine on the isolated GJ_HOME; keyword arguments override collaborators."""

    def _make(**kwargs) -> WorktreeEngine:
        kwargs.setdefault("hook_runner", HookRunner(console))
        kwargs.setdefault("clock", lambda: FIXED_NOW)
        kwargs.setdefault("console", console)
        return WorktreeEngine(ConfigStore(), StateStore(), **kwargs)

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()
