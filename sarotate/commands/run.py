"""SARotate run command implementation."""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import SARotateConfig, load_config
from ..credentials import build_rotation_groups
from ..exceptions import CommandFailureError
from ..notify import Notifier
from ..recovery import recover_groups
from ..swap import SwapScheduler

if TYPE_CHECKING:
    from ..cli_types import RunArgs

logger = logging.getLogger("sarotate")


@contextlib.contextmanager
def handle_stop_signals(stop_event: threading.Event) -> Iterator[None]:
    """Turn SIGINT/SIGTERM into stop_event.set() for the duration of the block."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, _frame):
        logger.info("Received %s, stopping after the current command", signal.Signals(signum).name)
        stop_event.set()

    previous = {sig: signal.signal(sig, _handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def run_rotation(
    config: SARotateConfig, *, notifier: Notifier, stop_event: threading.Event
) -> None:
    """Read credentials, recover rclone's current state and swap until stopped."""
    groups = build_rotation_groups(config)
    recover_groups(groups, config.rclone)
    if stop_event.is_set():
        return

    scheduler = SwapScheduler(
        groups, rclone=config.rclone, notifier=notifier, stop_event=stop_event
    )
    scheduler.run()


def cmd_run(args: RunArgs) -> None:
    """Start rotating service accounts.

    Any failure after the config is loaded is pushed to apprise, logged as
    critical and ends the process with rc=1. There is no automatic restart.
    """
    config = load_config(Path(args.config))
    notifier = Notifier(config.notification, timeout_s=config.rclone.timeout)
    stop_event = threading.Event()

    with handle_stop_signals(stop_event):
        try:
            run_rotation(config, notifier=notifier, stop_event=stop_event)
        except Exception as e:
            notifier.notify(str(e), logging.ERROR)
            logger.critical("Fatal error, shutting down. Error: %s", e)
            stop_event.set()
            raise CommandFailureError(rc=1) from e
