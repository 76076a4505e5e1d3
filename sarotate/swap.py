"""The service account swap loop."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from .config import RcloneConfig, RemoteBinding
from .credentials import CredentialRecord, RotationGroup
from .exceptions import ErrorKind
from .notify import Notifier
from .rclone import build_rc_command, build_swap_command, parse_swap_result, run_command
from .utils import format_elapsed_time

logger = logging.getLogger("sarotate")


class LoopState(Enum):
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass(frozen=True)
class SwapOutcome:
    """Result of one swap attempt for one remote."""

    group_key: str
    remote: str
    credential: CredentialRecord
    ok: bool
    rc: int
    previous_file: str | None = None
    current_file: str | None = None
    error: ErrorKind | None = None
    detail: str = ""


def swap_remote(
    group: RotationGroup,
    binding: RemoteBinding,
    *,
    rc_command: list[str],
    timeout_s: int,
) -> SwapOutcome:
    """Point binding.remote at the group's front credential.

    On success the queue is rotated once; on failure it is left untouched so
    the same credential is retried on the next pass.

    Raises:
        ResultParseError: If rclone succeeded but its payload is unreadable
    """
    record = group.front()
    cmd = build_swap_command(
        rc_command, address=binding.address, remote=binding.remote, file_path=record.file_path
    )
    rc, out, err = run_command(cmd, timeout_s=timeout_s)
    logger.debug("rclone: %s", out.strip() or err.strip())

    if rc != 0:
        return SwapOutcome(
            group_key=group.group_key,
            remote=binding.remote,
            credential=record,
            ok=False,
            rc=rc,
            error=ErrorKind.SWAP_COMMAND_FAILED,
            detail=(err or out).strip(),
        )

    group.rotate()
    result = parse_swap_result(out)
    return SwapOutcome(
        group_key=group.group_key,
        remote=binding.remote,
        credential=record,
        ok=True,
        rc=rc,
        previous_file=result.previous_file,
        current_file=result.current_file,
    )


class SwapScheduler:
    """Swap every remote of every group, then sleep, until stopped.

    Remotes are processed strictly one at a time. stop_event is checked before
    each group and each remote and interrupts the sleep, but never an
    in-flight rclone command. Once stopped the scheduler never runs again.
    """

    def __init__(
        self,
        groups: list[RotationGroup],
        *,
        rclone: RcloneConfig,
        notifier: Notifier,
        stop_event: threading.Event,
    ):
        self.groups = groups
        self.rclone = rclone
        self.notifier = notifier
        self.stop_event = stop_event
        self.rc_command = build_rc_command(rclone)
        self.state = LoopState.RUNNING

    def stop(self) -> None:
        self.state = LoopState.STOPPING
        self.stop_event.set()

    def _should_stop(self) -> bool:
        if self.stop_event.is_set():
            self.state = LoopState.STOPPING
        return self.state is LoopState.STOPPING

    def _report(self, outcome: SwapOutcome, group: RotationGroup) -> None:
        logger.debug("accountsForGroup: %s", ",".join(group.file_paths()))
        if not outcome.ok:
            logger.error(
                "Could not swap service account for remote %s (rc=%d): %s",
                outcome.remote,
                outcome.rc,
                outcome.detail,
            )
            self.notifier.notify(
                f"Could not swap service account for remote {outcome.remote}", logging.ERROR
            )
            return

        message = (
            f"Switching remote {outcome.remote} from service account "
            f"{outcome.previous_file} to {outcome.current_file} "
            f"for {self.rclone.sleep_time} seconds"
        )
        logger.info(message)
        self.notifier.notify(message, logging.INFO)

    def run_pass(self) -> list[SwapOutcome]:
        """Attempt one swap for every remote of every group."""
        outcomes: list[SwapOutcome] = []
        for group in self.groups:
            if self._should_stop():
                break
            for binding in group.bindings:
                if self._should_stop():
                    break
                outcome = swap_remote(
                    group, binding, rc_command=self.rc_command, timeout_s=self.rclone.timeout
                )
                self._report(outcome, group)
                outcomes.append(outcome)
        return outcomes

    def run(self) -> None:
        """Run passes until stop_event is set."""
        logger.info(
            "Rotating %d group(s) every %s",
            len(self.groups),
            format_elapsed_time(self.rclone.sleep_time),
        )
        while not self._should_stop():
            self.run_pass()
            if self._should_stop():
                break
            # wait() returns True when stop_event is set during the sleep
            if self.stop_event.wait(self.rclone.sleep_time):
                self.state = LoopState.STOPPING
        logger.info("Swap loop stopped")
