"""Align freshly built usage queues with the service accounts rclone already uses."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import RcloneConfig
from .credentials import RotationGroup
from .exceptions import ErrorKind, SARotateError
from .rclone import build_config_show_command, parse_active_credential, run_command

logger = logging.getLogger("sarotate")


@dataclass(frozen=True)
class ActiveLookup:
    """Outcome of asking rclone which service account a remote uses."""

    remote: str
    file_name: str | None
    error: ErrorKind | None = None
    detail: str = ""


@dataclass(frozen=True)
class RecoveryResult:
    """Outcome of recovering one remote's position in its group queue."""

    remote: str
    active_file: str | None
    recovered: bool
    error: ErrorKind | None = None
    detail: str = ""


def lookup_active_credential(remote: str, rclone: RcloneConfig) -> ActiveLookup:
    """Ask rclone for the service account file currently set on remote."""
    cmd = build_config_show_command(remote, config_path=rclone.config_path)
    try:
        rc, out, err = run_command(cmd, timeout_s=rclone.timeout)
    except SARotateError as e:
        return ActiveLookup(
            remote=remote, file_name=None, error=ErrorKind.RECOVERY_LOOKUP_FAILED, detail=str(e)
        )
    logger.debug("rclone config show %s: %s", remote, out.strip())

    if rc != 0:
        return ActiveLookup(
            remote=remote,
            file_name=None,
            error=ErrorKind.RECOVERY_LOOKUP_FAILED,
            detail=f"rclone config show failed (rc={rc}): {(err or out).strip()}",
        )

    file_name = parse_active_credential(out)
    if file_name is None:
        return ActiveLookup(
            remote=remote,
            file_name=None,
            error=ErrorKind.RECOVERY_LOOKUP_FAILED,
            detail="could not find service_account_file line",
        )
    return ActiveLookup(remote=remote, file_name=file_name)


def apply_active_credential(group: RotationGroup, lookup: ActiveLookup) -> RecoveryResult:
    """Move the active credential to the back of the group queue.

    Applying the same lookup twice leaves the queue as applying it once.
    """
    if lookup.file_name is None:
        logger.info(
            "unable to find previous service account used for remote %s: %s",
            lookup.remote,
            lookup.detail,
        )
        return RecoveryResult(
            remote=lookup.remote,
            active_file=None,
            recovered=False,
            error=lookup.error or ErrorKind.RECOVERY_LOOKUP_FAILED,
            detail=lookup.detail,
        )

    record = group.find_by_file_name(lookup.file_name)
    if record is None:
        logger.info("unable to find local file %s", lookup.file_name)
        logger.debug("group accounts %s", ",".join(group.file_paths()))
        return RecoveryResult(
            remote=lookup.remote,
            active_file=lookup.file_name,
            recovered=False,
            error=ErrorKind.RECOVERY_LOOKUP_FAILED,
            detail=f"{lookup.file_name} is not in {group.group_key}",
        )

    group.move_to_back(record)
    logger.debug("remote %s currently uses %s", lookup.remote, lookup.file_name)
    return RecoveryResult(remote=lookup.remote, active_file=lookup.file_name, recovered=True)


def recover_group(group: RotationGroup, rclone: RcloneConfig) -> list[RecoveryResult]:
    """Recover every remote of one group, sequentially."""
    return [
        apply_active_credential(group, lookup_active_credential(binding.remote, rclone))
        for binding in group.bindings
    ]


def recover_groups(groups: list[RotationGroup], rclone: RcloneConfig) -> list[RecoveryResult]:
    results: list[RecoveryResult] = []
    for group in groups:
        results.extend(recover_group(group, rclone))
    return results
