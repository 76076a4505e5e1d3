"""SARotate utility functions."""

from __future__ import annotations

from pathlib import Path

from .constants import TRUTHY_STRINGS


def last_path_segment(path: str) -> str:
    """Return the final '/'-delimited segment of path ('' for an empty path)."""
    return path.rstrip().split("/")[-1]


def format_elapsed_time(seconds: float) -> str:
    """Format a duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string like "1m25s", "45s", or "1h05m30s"
    """
    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours:
        return f"{hours}h{minutes:02d}m{secs:02d}s"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"


def ensure_parent_dir(p: Path) -> None:
    """Create parent directory of path if it doesn't exist."""
    p.parent.mkdir(parents=True, exist_ok=True)


def parse_kv_lines(output: str) -> dict[str, str]:
    """Parse key = value lines from string output.

    Section headers such as ``[remote]`` and lines without '=' are ignored.
    The first occurrence of a key wins.
    """
    d: dict[str, str] = {}
    for line in output.splitlines():
        if "=" in line:
            k, v = line.split("=", 1)
            d.setdefault(k.strip(), v.strip())
    return d


def as_bool(value: object) -> bool:
    """Interpret a YAML scalar as a flag (accepts y/yes/true/on/1)."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_STRINGS
