"""
SARotate - rotate Google service accounts across rclone remotes.

Design goals:
- Spread API usage evenly across projects to stay under per-account quotas.
- No state of its own: the active account is read back from rclone at startup.
- One remote at a time, failures isolated per remote, operators told via apprise.
"""

from __future__ import annotations

from .cli import main
from .constants import DEFAULT_CONFIG_FILE, DEFAULT_LOG_FILE
from .exceptions import ErrorKind, SARotateError, UserError

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_LOG_FILE",
    "ErrorKind",
    "SARotateError",
    "UserError",
    "main",
]
