"""SARotate command implementations."""

from __future__ import annotations

from .run import cmd_run
from .show_order import cmd_show_order

__all__ = [
    "cmd_run",
    "cmd_show_order",
]
