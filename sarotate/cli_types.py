"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RunArgs:
    """Arguments for run command."""

    config: str
    logfile: str | None


@dataclass
class ShowOrderArgs:
    """Arguments for show-order command."""

    config: str
    recover: bool
    json: bool
