"""Tests for post-create hook execution"""
import pytest

from gj.exceptions import HookCommandFailedError, HookError, MissingRequiredFileError
from gj.models.hooks import CopyHook, RunHook
from gj.services.hook_runner import HookRunner


@pytest.fixture
def origin(temp_dir):
    path = temp_dir / "origin"
    path.mkdir()
    return path


@pytest.fixture
def worktree(temp_dir):
    path = temp_dir / "worktree"
    path.mkdir()
    return path


@pytest.fixture
def runner(console):
    return HookRunner(console)


class TestCopyHooks:
    """Test copying files from the origin repository."""

    def test_copy_file(self, runner, origin, worktree):
        (origin / ".env").write_text("SECRET=1\n")

        result = runner.run([CopyHook(".env")], origin, worktree)

        assert result.ok
        assert result.completed == [0]
        assert (worktree / ".env").read_text() == "SECRET=1\n"

    def test_copy_with_rename_creates_parents(self, runner, origin, worktree):
        (origin / "settings.json").write_text("{}")

        result = runner.run([CopyHook("settings.json", "config/local.json")], origin, worktree)

        assert result.ok
        assert (worktree / "config" / "local.json").read_text() == "{}"

    def test_copy_directory(self, runner, origin, worktree):
        (origin / "certs").mkdir()
        (origin / "certs" / "dev.pem").write_text("pem")

        result = runner.run([CopyHook("certs")], origin, worktree)

        assert result.ok
        assert (worktree / "certs" / "dev.pem").read_text() == "pem"

    def test_optional_missing_source_is_skipped(self, runner, origin, worktree):
        result = runner.run([CopyHook(".env"), RunHook("touch after")], origin, worktree)

        assert result.ok
        assert result.skipped == [0]
        assert result.completed == [1]
        assert not (worktree / ".env").exists()
        assert (worktree / "after").exists()

    def test_required_missing_source_fails(self, runner, origin, worktree):
        result = runner.run([CopyHook(".env", required=True)], origin, worktree)

        assert not result.ok
        assert isinstance(result.error, MissingRequiredFileError)
        assert result.error.index == 0
        assert "Required file not found" in str(result.error)
        assert "copy: .env" in str(result.error)


class TestRunHooks:
    """Test shell command hooks."""

    def test_runs_in_worktree(self, runner, origin, worktree):
        result = runner.run([RunHook("pwd > where.txt")], origin, worktree)

        assert result.ok
        assert (worktree / "where.txt").read_text().strip() == str(worktree)

    def test_command_output_goes_to_stderr(self, runner, origin, worktree, capfd):
        runner.run([RunHook("echo installing")], origin, worktree)

        captured = capfd.readouterr()
        assert "installing" not in captured.out
        assert "installing" in captured.err

    def test_failing_command(self, runner, origin, worktree):
        result = runner.run([RunHook("exit 3")], origin, worktree)

        assert isinstance(result.error, HookCommandFailedError)
        assert result.error.returncode == 3
        assert "Hook #1 (run: exit 3) failed" in str(result.error)


class TestHookOrdering:
    """Test ordered, fail-fast execution."""

    def test_hooks_run_in_order(self, runner, origin, worktree):
        hooks = [RunHook(f"echo {i} >> order.txt") for i in range(3)]

        result = runner.run(hooks, origin, worktree)

        assert result.completed == [0, 1, 2]
        assert (worktree / "order.txt").read_text().split() == ["0", "1", "2"]

    def test_stops_at_first_failure(self, runner, origin, worktree):
        hooks = [
            RunHook("touch first"),
            CopyHook("missing.txt", required=True),
            RunHook("touch third"),
        ]

        result = runner.run(hooks, origin, worktree)

        assert result.completed == [0]
        assert result.error.index == 1
        assert (worktree / "first").exists()
        assert not (worktree / "third").exists()

    def test_no_hooks(self, runner, origin, worktree):
        result = runner.run([], origin, worktree)
        assert result.ok
        assert result.completed == []

    def test_copy_error_is_hook_error(self, runner, origin, worktree):
        (origin / "data.txt").write_text("x")
        # A file where the destination directory should be
        (worktree / "blocked").write_text("")

        result = runner.run([CopyHook("data.txt", "blocked/data.txt")], origin, worktree)

        assert isinstance(result.error, HookError)
        assert "Failed to copy" in str(result.error)
