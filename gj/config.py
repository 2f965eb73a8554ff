"""Configuration handling for gj"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from gj.constants import CONFIG_TEMPLATE, DEFAULT_PREFIX, PR_RESOLVERS, config_path, default_base_dir
from gj.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    DuplicateRepoPathError,
    NotRegisteredError,
)
from gj.logging_config import get_logger
from gj.models.hooks import CopyHook, Hook, RunHook

logger = get_logger(__name__)


def canonicalize(path: os.PathLike | str) -> Path:
    """Expand ``~`` and resolve symlinks so paths compare reliably."""
    return Path(os.path.expanduser(str(path))).resolve()


def parse_hook(data: Any) -> Hook:
    """Build a hook from one ``[[...hooks.post_create]]`` table.

    Raises:
        ValueError: if the table is not a valid copy or run hook
    """
    if not isinstance(data, dict):
        raise ValueError(f"hook entries must be tables, got {type(data).__name__}")

    hook_type = data.get("type")
    if hook_type == "copy":
        source = data.get("from")
        if not isinstance(source, str) or not source:
            raise ValueError("copy hook requires a non-empty 'from'")
        dest = data.get("to")
        if dest is not None and (not isinstance(dest, str) or not dest):
            raise ValueError("copy hook 'to' must be a non-empty string")
        required = data.get("required", False)
        if not isinstance(required, bool):
            raise ValueError("copy hook 'required' must be a boolean")
        return CopyHook(source=source, dest=dest, required=required)

    if hook_type == "run":
        command = data.get("command")
        if not isinstance(command, str) or not command.strip():
            raise ValueError("run hook requires a non-empty 'command'")
        return RunHook(command=command)

    raise ValueError(f"unknown hook type {hook_type!r} (expected 'copy' or 'run')")


def _parse_hooks(section: Dict[str, Any], where: str) -> List[Hook]:
    hooks = section.get("hooks", {})
    if not isinstance(hooks, dict):
        raise ValueError(f"{where}.hooks must be a table")
    post_create = hooks.get("post_create", [])
    if not isinstance(post_create, list):
        raise ValueError(f"{where}.hooks.post_create must be an array of tables")

    parsed = []
    for i, entry in enumerate(post_create):
        try:
            parsed.append(parse_hook(entry))
        except ValueError as e:
            raise ValueError(f"{where}.hooks.post_create[{i}]: {e}") from e
    return parsed


def _optional_str(section: Dict[str, Any], key: str, where: str) -> Optional[str]:
    value = section.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{where}.{key} must be a string")
    return value


@dataclass
class DefaultConfig:
    """Settings applied to every repository."""

    base_dir: Optional[str] = None
    prefix: Optional[str] = None
    pr_resolver: str = "gh"
    github_token: Optional[str] = None
    post_create: List[Hook] = field(default_factory=list)

    def __post_init__(self):
        if self.pr_resolver not in PR_RESOLVERS:
            raise ValueError(f"pr_resolver must be one of {list(PR_RESOLVERS)}, got '{self.pr_resolver}'")
        if self.prefix is not None and not self.prefix.strip("/"):
            raise ValueError("prefix cannot be empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DefaultConfig":
        return cls(
            base_dir=_optional_str(data, "base_dir", "default"),
            prefix=_optional_str(data, "prefix", "default"),
            pr_resolver=_optional_str(data, "pr_resolver", "default") or "gh",
            github_token=_optional_str(data, "github_token", "default"),
            post_create=_parse_hooks(data, "default"),
        )


@dataclass
class RepoConfig:
    """A registered origin repository."""

    name: str
    path: str
    base_dir: Optional[str] = None
    prefix: Optional[str] = None
    default_branch: Optional[str] = None
    post_create: List[Hook] = field(default_factory=list)

    def __post_init__(self):
        if not self.path or not self.path.strip():
            raise ValueError(f"repos.{self.name}.path cannot be empty")
        if self.prefix is not None and not self.prefix.strip("/"):
            raise ValueError(f"repos.{self.name}.prefix cannot be empty")

    @property
    def canonical_path(self) -> Path:
        return canonicalize(self.path)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "RepoConfig":
        where = f"repos.{name}"
        if not isinstance(data, dict):
            raise ValueError(f"{where} must be a table")
        if "path" not in data:
            raise ValueError(f"{where}.path is required")
        return cls(
            name=name,
            path=_optional_str(data, "path", where) or "",
            base_dir=_optional_str(data, "base_dir", where),
            prefix=_optional_str(data, "prefix", where),
            default_branch=_optional_str(data, "default_branch", where),
            post_create=_parse_hooks(data, where),
        )


@dataclass
class GlobalConfig:
    """Parsed contents of config.toml."""

    default: DefaultConfig = field(default_factory=DefaultConfig)
    repos: Dict[str, RepoConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GlobalConfig":
        default = data.get("default", {})
        if not isinstance(default, dict):
            raise ValueError("[default] must be a table")
        repos = data.get("repos", {})
        if not isinstance(repos, dict):
            raise ValueError("[repos] must be a table")
        return cls(
            default=DefaultConfig.from_dict(default),
            repos={name: RepoConfig.from_dict(name, entry) for name, entry in repos.items()},
        )

    def base_dir_for(self, repo: Optional[RepoConfig]) -> Path:
        """Base directory for worktrees: repo override, then default, then ~/.gj/worktrees."""
        base_dir = (repo.base_dir if repo else None) or self.default.base_dir
        if base_dir is None:
            return default_base_dir()
        return Path(os.path.expanduser(base_dir))

    def prefix_for(self, repo: Optional[RepoConfig]) -> str:
        prefix = (repo.prefix if repo else None) or self.default.prefix or DEFAULT_PREFIX
        return prefix.strip("/")

    def merged_hooks(self, repo: Optional[RepoConfig]) -> List[Hook]:
        """Default hooks followed by repository hooks, in declaration order."""
        hooks: List[Hook] = list(self.default.post_create)
        if repo is not None:
            hooks.extend(repo.post_create)
        return hooks

    def all_base_dirs(self) -> List[Path]:
        """Every configured base directory, default first, without duplicates."""
        dirs = [self.base_dir_for(None)]
        for repo in self.repos.values():
            candidate = self.base_dir_for(repo)
            if candidate not in dirs:
                dirs.append(candidate)
        return dirs


class ConfigStore:
    """Loads config.toml and matches repositories against it."""

    def __init__(self, path: Optional[Path] = None):
        """Initialize the store.

        Args:
            path: Path to the TOML file (defaults to ~/.gj/config.toml)
        """
        self.path = Path(path) if path is not None else config_path()
        self._config: Optional[GlobalConfig] = None

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> GlobalConfig:
        """Parse the configuration file once per invocation.

        Raises:
            ConfigNotFoundError: if the file does not exist
            ConfigParseError: if the file is not valid TOML or has invalid fields
        """
        if self._config is not None:
            return self._config

        if not self.exists:
            raise ConfigNotFoundError(self.path)

        try:
            with open(self.path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigParseError(self.path, str(e)) from e
        except OSError as e:
            raise ConfigParseError(self.path, f"could not read file: {e}") from e

        try:
            self._config = GlobalConfig.from_dict(data)
        except ValueError as e:
            raise ConfigParseError(self.path, str(e)) from e

        logger.debug(
            f"Loaded config from {self.path}: {len(self._config.repos)} repos, "
            f"{len(self._config.default.post_create)} default hooks"
        )
        return self._config

    def resolve(self, repo_root: os.PathLike | str) -> RepoConfig:
        """Find the repository entry whose path matches ``repo_root``.

        Raises:
            NotRegisteredError: if no entry matches
            DuplicateRepoPathError: if more than one entry matches
        """
        config = self.load()
        root = canonicalize(repo_root)

        matches = [repo for repo in config.repos.values() if repo.canonical_path == root]
        if not matches:
            raise NotRegisteredError(root, self.path)
        if len(matches) > 1:
            raise DuplicateRepoPathError(root, [repo.name for repo in matches])

        logger.debug(f"Resolved {root} to repos.{matches[0].name}")
        return matches[0]

    def merged_hooks(self, repo: RepoConfig) -> List[Hook]:
        return self.load().merged_hooks(repo)

    def write_template(self, force: bool = False) -> Path:
        """Create config.toml from the commented template.

        Raises:
            ConfigError: if the file exists and ``force`` is False
        """
        if self.exists and not force:
            raise ConfigError(
                f"Configuration file already exists at {self.path}. Use `gj init --force` to overwrite."
            )

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(CONFIG_TEMPLATE)
        self._config = None
        logger.info(f"Wrote configuration template to {self.path}")
        return self.path
