"""Tests for the command-line interface"""
from pathlib import Path

import pytest

from gj.cli import main, parse_args
from gj.config import canonicalize


class TestParseArgs:
    """Test argument parsing."""

    def test_aliases(self):
        assert parse_args(["co", "origin/main"]).command == "checkout"
        assert parse_args(["ls"]).command == "list"

    def test_pr_number_must_be_integer(self):
        with pytest.raises(SystemExit):
            parse_args(["pr", "abc"])

    def test_new_flags(self):
        args = parse_args(["new", "--random-suffix", "--no-cd"])
        assert args.suffix is None
        assert args.random_suffix is True
        assert args.no_cd is True

    def test_exit_flags(self):
        args = parse_args(["exit", "-f", "--merge"])
        assert args.force is True
        assert args.merge is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestShellInit:
    """Test `gj shell-init`."""

    @pytest.mark.parametrize("shell", ["zsh", "bash"])
    def test_posix_wrapper(self, shell, capsys):
        assert main(["shell-init", shell]) == 0
        out = capsys.readouterr().out
        assert "function gj()" in out
        assert 'cd "$output"' in out

    def test_fish_wrapper(self, capsys):
        assert main(["shell-init", "fish"]) == 0
        assert "function gj\n" in capsys.readouterr().out

    def test_unsupported_shell(self, capsys):
        assert main(["shell-init", "tcsh"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Unsupported shell: tcsh" in captured.err


class TestInit:
    """Test `gj init`."""

    def test_creates_config_and_state_dir(self, gj_home, capsys):
        assert main(["init"]) == 0

        assert (gj_home / "config.toml").is_file()
        assert (gj_home / "state").is_dir()
        assert capsys.readouterr().out == ""

    def test_existing_config(self, gj_home, capsys):
        (gj_home / "config.toml").write_text("[default]\n")

        assert main(["init"]) == 1
        assert "already exists" in capsys.readouterr().err
        assert (gj_home / "config.toml").read_text() == "[default]\n"

    def test_force_overwrites(self, gj_home):
        (gj_home / "config.toml").write_text("[default]\n")

        assert main(["init", "--force"]) == 0
        assert "[repos.my-app]" in (gj_home / "config.toml").read_text()


class TestWorktreeCommands:
    """Test stdout discipline of the worktree commands."""

    def test_new_prints_only_the_path(self, engine, registered_repo, worktrees_dir, monkeypatch, capsys):
        monkeypatch.chdir(registered_repo.working_tree_dir)

        assert main(["new", "cli-test"], engine=engine) == 0

        out = capsys.readouterr().out
        assert out == f"{canonicalize(worktrees_dir) / 'demo' / 'cli-test'}\n"

    def test_new_no_cd_keeps_stdout_empty(self, engine, registered_repo, monkeypatch, capsys):
        monkeypatch.chdir(registered_repo.working_tree_dir)

        assert main(["new", "quiet", "--no-cd"], engine=engine) == 0
        assert capsys.readouterr().out == ""

    def test_hook_failure_exits_non_zero(self, engine, git_repo, worktrees_dir, write_config, monkeypatch, capsys):
        write_config(
            f'[default]\nbase_dir = "{worktrees_dir}"\n'
            f'[repos.demo]\npath = "{git_repo.working_tree_dir}"\n'
            '[[repos.demo.hooks.post_create]]\ntype = "run"\ncommand = "exit 4"\n'
        )
        monkeypatch.chdir(git_repo.working_tree_dir)

        assert main(["new", "failing"], engine=engine) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert (worktrees_dir / "demo" / "failing").is_dir()

    def test_cd_and_exit(self, engine, registered_repo, monkeypatch, capsys):
        created = engine.create_new(canonicalize(registered_repo.working_tree_dir), "roundtrip")
        capsys.readouterr()

        assert main(["cd", "roundtrip"], engine=engine) == 0
        assert capsys.readouterr().out == f"{created.path}\n"

        monkeypatch.chdir(created.path)
        assert main(["exit"], engine=engine) == 0
        assert capsys.readouterr().out == f"{canonicalize(registered_repo.working_tree_dir)}\n"
        assert not created.path.exists()

    def test_exit_outside_worktree(self, engine, gj_home, temp_dir, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)

        assert main(["exit"], engine=engine) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Not in a gj-managed worktree" in captured.err

    def test_exit_with_corrupt_record(self, engine, registered_repo, monkeypatch, capsys):
        created = engine.create_new(canonicalize(registered_repo.working_tree_dir), "broken")
        for record_file in engine.state_store.directory.glob("*.json"):
            record_file.write_text("{not json")
        capsys.readouterr()
        monkeypatch.chdir(created.path)

        assert main(["exit"], engine=engine) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Corrupt state record" in captured.err
        assert "Unexpected error" not in captured.err

    def test_cd_unknown(self, engine, gj_home, capsys):
        assert main(["cd", "nothing"], engine=engine) == 1
        assert "No worktree found matching 'nothing'" in capsys.readouterr().err

    def test_list_empty(self, engine, gj_home, capsys):
        assert main(["list"], engine=engine) == 0
        assert "No managed worktrees found." in capsys.readouterr().err

    def test_list_table(self, engine, registered_repo, capsys):
        engine.create_new(canonicalize(registered_repo.working_tree_dir), "listed")
        capsys.readouterr()

        assert main(["ls"], engine=engine) == 0
        out = capsys.readouterr().out
        assert "demo/listed" in out
        assert "gj/20240305_listed" in out
        assert "active" in out

    def test_missing_config(self, engine, gj_home, git_repo, monkeypatch, capsys):
        monkeypatch.chdir(git_repo.working_tree_dir)

        assert main(["new", "x"], engine=engine) == 1
        assert "gj init" in capsys.readouterr().err
        assert not Path(gj_home / "state").exists()
