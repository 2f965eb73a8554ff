"""Formatting helpers shared by the CLI and the selector."""

from .date import format_relative_time
from .paths import display_name, sanitize_name, feature_branch_name, strip_remote_prefix

__all__ = [
    "format_relative_time",
    "display_name",
    "sanitize_name",
    "feature_branch_name",
    "strip_remote_prefix",
]
