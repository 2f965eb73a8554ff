"""Shared constants for gj."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

# Environment variable that relocates the gj home directory (config, state, logs)
GJ_HOME_ENV = "GJ_HOME"

CONFIG_FILE_NAME = "config.toml"
STATE_DIR_NAME = "state"
WORKTREES_DIR_NAME = "worktrees"

DEFAULT_PREFIX = "gj"
DEFAULT_REMOTE = "origin"
PR_RESOLVERS = ("gh", "api")


def gj_home() -> Path:
    """Return the gj home directory (~/.gj unless GJ_HOME is set)."""
    override = os.environ.get(GJ_HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".gj"


def config_path() -> Path:
    """Return the path of the global configuration file."""
    return gj_home() / CONFIG_FILE_NAME


def state_dir() -> Path:
    """Return the directory holding one JSON record per managed worktree."""
    return gj_home() / STATE_DIR_NAME


def default_base_dir() -> Path:
    """Return the default parent directory for new worktrees."""
    return gj_home() / WORKTREES_DIR_NAME


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


# Columns of `gj list`
COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("name", "Worktree", 40),
    ColumnDefinition("branch", "Branch", 40),
    ColumnDefinition("age", "Created", 14),
    ColumnDefinition("status", "Status", 10),
]

STATUS_ACTIVE = "active"
STATUS_MISSING = "missing"  # record without a directory
STATUS_UNTRACKED = "untracked"  # directory without a record

# Rich styles for list rows
STATUS_COLORS: Dict[str, str] = {
    STATUS_ACTIVE: "green",
    STATUS_MISSING: "red",
    STATUS_UNTRACKED: "yellow",
}


# Word lists for --random-suffix
ADJECTIVES = ['brave', 'swift', 'calm', 'bold', 'keen',
              'wild', 'warm', 'cool', 'fair', 'wise']
NOUNS = ['panda', 'falcon', 'river', 'mountain', 'oak',
         'wolf', 'hawk', 'cedar', 'fox', 'bear']


CONFIG_TEMPLATE = """\
# gj configuration file

[default]
# Base directory for worktrees (default: ~/.gj/worktrees)
# base_dir = "~/.gj/worktrees"

# Default branch prefix for `gj new` (default: gj)
# prefix = "gj"

# How `gj pr` resolves a PR number: "gh" (GitHub CLI) or "api" (needs GITHUB_TOKEN)
# pr_resolver = "gh"

# Example: Default hooks applied to all repositories
# [[default.hooks.post_create]]
# type = "run"
# command = "echo 'Worktree created!'"

# Example: Repository-specific configuration
# [repos.my-app]
# path = "~/dev/my-app"
# prefix = "feature"
# default_branch = "main"
#
# [[repos.my-app.hooks.post_create]]
# type = "copy"
# from = ".env"
# required = true
#
# [[repos.my-app.hooks.post_create]]
# type = "run"
# command = "npm install"
"""


_POSIX_WRAPPER = """\
function gj() {
  local output
  output=$(command gj "$@")
  local exit_code=$?

  if [[ $exit_code -eq 0 && -d "$output" ]]; then
    cd "$output"
  elif [[ -n "$output" ]]; then
    echo "$output"
  fi
  return $exit_code
}
"""

_FISH_WRAPPER = """\
function gj
    set -l output (command gj $argv)
    set -l exit_code $status

    if test $exit_code -eq 0; and test -d "$output"
        cd "$output"
    else if test -n "$output"
        printf '%s\\n' $output
    end
    return $exit_code
end
"""

SHELL_WRAPPERS: Dict[str, str] = {
    "zsh": _POSIX_WRAPPER,
    "bash": _POSIX_WRAPPER,
    "fish": _FISH_WRAPPER,
}
