"""
Display formatting helpers for backup listings.
"""

from datetime import datetime, timezone

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_file_size(size: int | float | None) -> str:
    """Human readable size with up to two decimals, e.g. 1536 -> '1.5 KB'."""
    if not size or size <= 0:
        return "0 B"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[exponent]}"


def format_relative_time(timestamp: datetime | None, now: datetime | None = None) -> str:
    """Coarse 'time ago' label for a backup timestamp."""
    if timestamp is None:
        return "unknown"
    if now is None:
        now = datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    minutes = int((now - timestamp).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    if days < 30:
        return f"{days} day{'s' if days != 1 else ''} ago"
    months = days // 30
    return f"{months} month{'s' if months != 1 else ''} ago"


def backup_preview(content: str, max_lines: int = 10) -> str:
    """First max_lines lines of a backup, with a note on how many were cut."""
    lines = content.split("\n")
    if len(lines) <= max_lines:
        return content
    hidden = len(lines) - max_lines
    return "\n".join(lines[:max_lines]) + f"\n... ({hidden} more lines)"
