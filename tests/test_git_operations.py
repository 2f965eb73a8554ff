"""Tests for GitOperations and worktree listing"""
from pathlib import Path

import pytest

from gj.exceptions import GitOperationError, NotAGitRepoError
from gj.services.git import GitOperations, parse_worktree_porcelain


class TestParseWorktreePorcelain:
    """Test parsing of `git worktree list --porcelain`."""

    def test_main_and_linked(self, temp_dir):
        linked = temp_dir / "wt"
        linked.mkdir()
        output = (
            f"worktree {temp_dir}\n"
            "HEAD 1111111111111111111111111111111111111111\n"
            "branch refs/heads/main\n"
            "\n"
            f"worktree {linked}\n"
            "HEAD 2222222222222222222222222222222222222222\n"
            "branch refs/heads/gj/20240305_login\n"
            "\n"
        )

        worktrees = parse_worktree_porcelain(output)

        assert [w.branch_name for w in worktrees] == ["main", "gj/20240305_login"]
        assert worktrees[0].is_main is True
        assert worktrees[1].is_main is False
        assert worktrees[1].commit_sha.startswith("2222")
        assert worktrees[1].is_orphaned is False

    def test_detached_and_missing(self, temp_dir):
        output = (
            f"worktree {temp_dir}\n"
            "HEAD 1111111111111111111111111111111111111111\n"
            "branch refs/heads/main\n"
            "\n"
            "worktree /definitely/not/here\n"
            "HEAD 3333333333333333333333333333333333333333\n"
            "detached"
        )

        worktrees = parse_worktree_porcelain(output)

        assert len(worktrees) == 2
        assert worktrees[1].branch_name == ""
        assert worktrees[1].is_orphaned is True

    def test_empty_output(self):
        assert parse_worktree_porcelain("") == []


class TestGitOperations:
    """Test git operations against a real repository."""

    def test_toplevel_from_subdirectory(self, git_repo):
        root = Path(git_repo.working_tree_dir)
        (root / "a" / "b").mkdir(parents=True)

        assert GitOperations(root / "a" / "b").toplevel() == root.resolve()

    def test_toplevel_outside_repository(self, temp_dir):
        plain = temp_dir / "plain"
        plain.mkdir()
        with pytest.raises(NotAGitRepoError):
            GitOperations(plain).toplevel()

    def test_toplevel_missing_directory(self, temp_dir):
        with pytest.raises(NotAGitRepoError):
            GitOperations(temp_dir / "missing").toplevel()

    def test_branch_exists(self, git_repo):
        ops = GitOperations(git_repo.working_tree_dir)
        assert ops.branch_exists("main") is True
        assert ops.branch_exists("nope") is False

    def test_default_branch_falls_back_to_main(self, git_repo):
        assert GitOperations(git_repo.working_tree_dir).get_default_branch() == "main"

    def test_default_branch_from_origin_head(self, git_repo):
        git_repo.git.push("origin", "main:trunk")
        git_repo.git.remote("set-head", "origin", "trunk")

        assert GitOperations(git_repo.working_tree_dir).get_default_branch() == "trunk"

    def test_no_default_branch(self, git_repo):
        git_repo.git.branch("-M", "develop")

        with pytest.raises(GitOperationError, match="default branch"):
            GitOperations(git_repo.working_tree_dir).get_default_branch()

    def test_current_branch_detached(self, git_repo):
        ops = GitOperations(git_repo.working_tree_dir)
        assert ops.current_branch() == "main"

        git_repo.git.checkout("--detach")
        assert ops.current_branch() is None

    def test_has_uncommitted_changes(self, git_repo):
        ops = GitOperations(git_repo.working_tree_dir)
        assert ops.has_uncommitted_changes() is False

        (Path(git_repo.working_tree_dir) / "new.txt").write_text("x")
        assert ops.has_uncommitted_changes() is True

    def test_delete_unmerged_branch_warns(self, git_repo, caplog):
        git_repo.git.checkout("-b", "unmerged")
        (Path(git_repo.working_tree_dir) / "work.txt").write_text("x")
        git_repo.git.add("work.txt")
        git_repo.git.commit("-m", "work")
        git_repo.git.checkout("main")
        ops = GitOperations(git_repo.working_tree_dir)

        assert ops.delete_branch("unmerged") is False
        assert "Could not delete branch unmerged" in caplog.text
        assert ops.branch_exists("unmerged") is True

        assert ops.delete_branch("unmerged", force=True) is True
        assert ops.branch_exists("unmerged") is False

    def test_fetch_missing_branch(self, git_repo):
        with pytest.raises(GitOperationError, match="fetch"):
            GitOperations(git_repo.working_tree_dir).fetch_branch("not-on-origin")

    def test_add_list_remove_worktree(self, git_repo, temp_dir):
        ops = GitOperations(git_repo.working_tree_dir)
        path = temp_dir / "trees" / "demo" / "feature"

        ops.add_worktree(path, "feature", new_branch=True)
        listed = {Path(w.path).resolve(): w for w in ops.list_worktrees()}
        assert listed[path].branch_name == "feature"
        assert listed[path].is_main is False

        ops.remove_worktree(path)
        assert not path.exists()
        assert path not in {Path(w.path).resolve() for w in ops.list_worktrees()}

    def test_merge_abort_without_merge_is_noop(self, git_repo):
        GitOperations(git_repo.working_tree_dir).merge_abort()
