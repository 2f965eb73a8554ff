"""Worktree lifecycle engine: creation, lookup and teardown of gj worktrees."""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from rich.console import Console

from gj.config import ConfigStore, GlobalConfig, RepoConfig, canonicalize
from gj.constants import DEFAULT_REMOTE, STATUS_ACTIVE, STATUS_MISSING, STATUS_UNTRACKED, default_base_dir
from gj.exceptions import (
    AmbiguousWorktreeError,
    DirtyWorktreeError,
    GitOperationError,
    GjError,
    InvalidNameError,
    MergeConflictError,
    NotAGitRepoError,
    NotAWorktreeError,
    NotRegisteredError,
    WorktreeExistsError,
    WorktreeNotFoundError,
)
from gj.formatters import display_name, feature_branch_name, sanitize_name, strip_remote_prefix
from gj.logging_config import get_logger
from gj.models.hooks import HookResult
from gj.models.state import WorktreeState
from gj.services.git import GitOperations
from gj.services.github import make_pr_resolver
from gj.services.hook_runner import HookRunner
from gj.services.prompt import prompt_for_suffix, random_suffix
from gj.services.state_store import StateStore

logger = get_logger(__name__)


@dataclass
class BranchPlan:
    """How the branch of a new worktree is obtained."""

    branch: str
    slug: str  # last path segment of the worktree directory
    from_remote: bool  # True: check out (or fetch) an existing branch; False: branch off HEAD
    pull_refspec: Optional[str] = None  # fallback fetch for PRs whose head is not on origin


@dataclass
class CreatedWorktree:
    path: Path
    branch: str
    state: WorktreeState
    hook_result: HookResult


@dataclass
class ListEntry:
    """One row of `gj list`."""

    name: str
    path: Path
    branch: str
    created_at: Optional[datetime]
    status: str  # active, missing or untracked


class WorktreeEngine:
    """Creates and tears down worktrees, keeping state records in lockstep.

    All side-effecting collaborators are injected so the state machine can be
    driven by fakes in tests.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        state_store: StateStore,
        hook_runner: Optional[HookRunner] = None,
        git_factory: Callable[[Path], GitOperations] = GitOperations,
        pr_resolver_factory: Callable = make_pr_resolver,
        prompt: Callable[[], str] = prompt_for_suffix,
        selector: Optional[Callable[[Sequence[str]], Optional[int]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        console: Optional[Console] = None,
    ):
        self.config_store = config_store
        self.state_store = state_store
        self.console = console or Console(stderr=True)
        self.hook_runner = hook_runner or HookRunner(self.console)
        self.git_factory = git_factory
        self.pr_resolver_factory = pr_resolver_factory
        self.prompt = prompt
        self.selector = selector
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # Creation

    def create_for_pr(self, cwd: Path, number: int) -> CreatedWorktree:
        """Create a worktree on the head branch of pull request ``number``."""

        def plan(root: Path, repo: RepoConfig, config: GlobalConfig) -> BranchPlan:
            resolver = self.pr_resolver_factory(config, self.git_factory(root))
            branch = resolver.resolve(number)
            self.console.print(f"Fetching PR #{number} ({branch})...")
            return BranchPlan(
                branch=branch,
                slug=f"pr-{number}",
                from_remote=True,
                pull_refspec=f"pull/{number}/head",
            )

        return self._create(cwd, plan)

    def create_new(self, cwd: Path, suffix: Optional[str] = None, use_random_suffix: bool = False) -> CreatedWorktree:
        """Create a worktree on a fresh ``<prefix>/<YYYYMMDD>_<suffix>`` branch."""

        def plan(root: Path, repo: RepoConfig, config: GlobalConfig) -> BranchPlan:
            raw = suffix
            if raw is None:
                raw = random_suffix() if use_random_suffix else self.prompt()
            slug = sanitize_name(raw)
            if not slug.strip("-_"):
                raise InvalidNameError("Branch name cannot be empty")
            branch = feature_branch_name(config.prefix_for(repo), slug, self.clock())
            return BranchPlan(branch=branch, slug=slug, from_remote=False)

        return self._create(cwd, plan)

    def create_from_remote(self, cwd: Path, remote_branch: str) -> CreatedWorktree:
        """Create a worktree tracking an existing branch on origin."""

        def plan(root: Path, repo: RepoConfig, config: GlobalConfig) -> BranchPlan:
            branch = strip_remote_prefix(remote_branch.strip())
            if not branch:
                raise InvalidNameError("Remote branch name cannot be empty")
            self.console.print(f"Fetching branch '{branch}'...")
            return BranchPlan(branch=branch, slug=sanitize_name(branch), from_remote=True)

        return self._create(cwd, plan)

    def _create(self, cwd: Path, make_plan: Callable[[Path, RepoConfig, GlobalConfig], BranchPlan]) -> CreatedWorktree:
        root = self.git_factory(cwd).toplevel()
        config = self.config_store.load()
        repo = self.config_store.resolve(root)

        plan = make_plan(root, repo, config)

        base_dir = canonicalize(config.base_dir_for(repo))
        worktree_path = base_dir / repo.name / plan.slug
        if worktree_path.exists():
            raise WorktreeExistsError(worktree_path, f"{repo.name}/{plan.slug}")

        git_ops = self.git_factory(root)
        try:
            if plan.from_remote:
                created_branch = self._add_remote_worktree(git_ops, worktree_path, plan)
            else:
                git_ops.add_worktree(worktree_path, plan.branch, new_branch=True)
                created_branch = True
        except GitOperationError as e:
            # Another invocation created the directory after the check above
            if worktree_path.exists():
                raise WorktreeExistsError(worktree_path, f"{repo.name}/{plan.slug}") from e
            raise

        # Record before hooks run so a failing hook still leaves a tracked worktree
        state = WorktreeState(
            worktree_path=worktree_path,
            origin_repo=root,
            branch=plan.branch,
            created_at=self.clock().replace(microsecond=0),
            created_branch=created_branch,
        )
        self.state_store.put(state)

        hooks = self.config_store.merged_hooks(repo)
        hook_result = self.hook_runner.run(hooks, root, worktree_path)

        logger.info(f"Worktree {worktree_path} ready on {plan.branch}")
        return CreatedWorktree(path=worktree_path, branch=plan.branch, state=state, hook_result=hook_result)

    def _add_remote_worktree(self, git_ops: GitOperations, path: Path, plan: BranchPlan) -> bool:
        """Add a worktree on an existing branch.

        Returns:
            True if the local branch was created here, False if it already existed
        """
        if git_ops.branch_exists(plan.branch):
            logger.info(f"Branch {plan.branch} exists locally, checking it out")
            git_ops.add_worktree(path, plan.branch)
            return False

        try:
            git_ops.fetch_branch(plan.branch)
        except GitOperationError:
            if not plan.pull_refspec:
                raise
            logger.info(f"{plan.branch} is not on {DEFAULT_REMOTE}, fetching {plan.pull_refspec}")
            git_ops.fetch_ref(f"{plan.pull_refspec}:refs/heads/{plan.branch}")
            git_ops.add_worktree(path, plan.branch)
            return True

        git_ops.add_worktree(
            path,
            plan.branch,
            new_branch=True,
            start_point=f"{DEFAULT_REMOTE}/{plan.branch}",
            track=True,
        )
        return True

    # Lookup

    def current_state(self, cwd: Path) -> WorktreeState:
        """State record of the managed worktree containing ``cwd``.

        Raises:
            NotAWorktreeError: if ``cwd`` is not inside a gj-managed worktree
        """
        try:
            root = self.git_factory(cwd).toplevel()
        except NotAGitRepoError as e:
            raise NotAWorktreeError(cwd) from e

        state = self.state_store.get(root)
        if state is None:
            raise NotAWorktreeError(root)
        return state

    def base_dirs(self) -> List[Path]:
        """Canonical base directories used to derive display names."""
        if not self.config_store.exists:
            return [canonicalize(default_base_dir())]
        return [canonicalize(d) for d in self.config_store.load().all_base_dirs()]

    def find_worktree(self, name: str) -> WorktreeState:
        """Resolve a worktree by display name, last segment or trailing segments."""
        base_dirs = self.base_dirs()
        matching = []
        for state in self.state_store.list_all():
            short = display_name(state.worktree_path, base_dirs)
            if state.worktree_path.name == name or short == name or short.endswith(f"/{name}"):
                matching.append(state)

        if not matching:
            raise WorktreeNotFoundError(f"No worktree found matching '{name}'")
        if len(matching) > 1:
            raise AmbiguousWorktreeError(name, [display_name(s.worktree_path, base_dirs) for s in matching])

        state = matching[0]
        if not state.exists:
            raise WorktreeNotFoundError(f"Worktree no longer exists at {state.worktree_path}")
        return state

    def cd_target(self, cwd: Path, name: Optional[str] = None) -> Optional[Path]:
        """Directory `gj cd` should switch to; None when interactive selection was cancelled."""
        if name == "@":
            return self.current_state(cwd).origin_repo
        if name:
            return self.find_worktree(name).worktree_path
        return self._select_interactively()

    def _select_interactively(self) -> Optional[Path]:
        states = self.state_store.list_all()
        if not states:
            raise WorktreeNotFoundError("No managed worktrees found. Create one with `gj new` or `gj pr`.")

        existing = [s for s in states if s.exists]
        if not existing:
            raise WorktreeNotFoundError("No existing worktrees found.")

        base_dirs = self.base_dirs()
        labels = [f"{display_name(s.worktree_path, base_dirs)} ({s.branch})" for s in existing]

        selector = self.selector
        if selector is None:
            from gj.ui.selector import select_index
            selector = select_index

        index = selector(labels)
        if index is None:
            return None
        return existing[index].worktree_path

    def list_entries(self) -> List[ListEntry]:
        """Every state record plus git worktrees under a base dir that have no record."""
        base_dirs = self.base_dirs()
        states = self.state_store.list_all()

        entries = [
            ListEntry(
                name=display_name(s.worktree_path, base_dirs),
                path=s.worktree_path,
                branch=s.branch,
                created_at=s.created_at,
                status=STATUS_ACTIVE if s.exists else STATUS_MISSING,
            )
            for s in states
        ]

        tracked = {s.worktree_path for s in states}
        for info in self._unrecorded_worktrees(states, base_dirs, tracked):
            entries.append(
                ListEntry(
                    name=display_name(Path(info.path), base_dirs),
                    path=Path(info.path),
                    branch=info.branch_name,
                    created_at=None,
                    status=STATUS_UNTRACKED,
                )
            )
        return entries

    def _unrecorded_worktrees(self, states, base_dirs, tracked):
        origins = {s.origin_repo for s in states}
        if self.config_store.exists:
            origins.update(r.canonical_path for r in self.config_store.load().repos.values())

        seen = set()
        for origin in sorted(origins):
            if not origin.is_dir():
                continue
            try:
                infos = self.git_factory(origin).list_worktrees()
            except GjError as e:
                logger.warning(f"Could not list worktrees of {origin}: {e}")
                continue
            for info in infos:
                path = Path(info.path).resolve()
                if info.is_main or path in tracked or path in seen:
                    continue
                if any(path.is_relative_to(base) for base in base_dirs):
                    seen.add(path)
                    yield info

    # Teardown

    def exit_worktree(self, cwd: Path, force: bool = False, merge: bool = False) -> Path:
        """Remove the worktree containing ``cwd`` and return its origin repository.

        Nothing is removed unless the tree is clean or ``force`` is given; a
        failed merge leaves worktree, branch and state record untouched.
        """
        state = self.current_state(cwd)

        if not force and self.git_factory(state.worktree_path).has_uncommitted_changes():
            raise DirtyWorktreeError(state.worktree_path)

        origin_ops = self.git_factory(state.origin_repo)
        if merge:
            self._merge_into_default(origin_ops, state)

        origin_ops.remove_worktree(state.worktree_path, force=force)
        if state.created_branch:
            origin_ops.delete_branch(state.branch, force=force)
        else:
            logger.info(f"Keeping branch {state.branch}, it existed before the worktree")
        self.state_store.delete(state.worktree_path)

        logger.info(f"Removed worktree {state.worktree_path}")
        return state.origin_repo

    def _merge_into_default(self, origin_ops: GitOperations, state: WorktreeState) -> None:
        target = self._default_branch_override(state.origin_repo) or origin_ops.get_default_branch()

        if origin_ops.current_branch() != target:
            logger.info(f"Switching {state.origin_repo} to {target}")
            origin_ops.checkout(target)

        self.console.print(f"Merging {state.branch} into {target}...")
        try:
            origin_ops.merge(state.branch)
        except GitOperationError as e:
            origin_ops.merge_abort()
            raise MergeConflictError(state.branch, target, e.message) from e

    def _default_branch_override(self, origin: Path) -> Optional[str]:
        if not self.config_store.exists:
            return None
        try:
            return self.config_store.resolve(origin).default_branch
        except NotRegisteredError:
            return None
