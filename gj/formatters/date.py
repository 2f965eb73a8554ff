"""Date and time formatting utilities."""

from datetime import datetime


def _plural(count: int, unit: str) -> str:
    return f"1 {unit} ago" if count == 1 else f"{count} {unit}s ago"


def format_relative_time(now: datetime, created: datetime) -> str:
    """
    Format the age of a worktree.

    Args:
        now: Current time (timezone-aware)
        created: Creation time (timezone-aware)

    Returns:
        "just now", "5 minutes ago", "1 hour ago", "2 days ago", ...
    """
    seconds = int((now - created).total_seconds())

    if seconds >= 86400:
        return _plural(seconds // 86400, "day")
    if seconds >= 3600:
        return _plural(seconds // 3600, "hour")
    if seconds >= 60:
        return _plural(seconds // 60, "minute")
    return "just now"
