"""SARotate external command execution and rclone output parsing."""

from __future__ import annotations

import json
import logging
import subprocess
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import RcloneConfig
from .constants import (
    COMMAND_TIMEOUT_EXIT_CODE,
    RCLONE_BINARY,
    SERVICE_ACCOUNT_FIELD,
    SWAP_RESULT_MARKER,
)
from .exceptions import ResultParseError, SARotateError
from .utils import last_path_segment, parse_kv_lines

logger = logging.getLogger("sarotate")


def run_command(cmd: List[str], *, timeout_s: int = 120) -> Tuple[int, str, str]:
    """
    Executes cmd without a shell.

    Returns (returncode, stdout, stderr). Does NOT raise on non-zero rc.
    """
    logger.debug("Command: %s", cmd[0])
    logger.debug("Command timeout: %ds", timeout_s)

    start_time = time.time()
    try:
        p = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout_s,
            check=False,
            # Own session so a signal sent to our process group cannot kill the command.
            start_new_session=True,
        )
    except subprocess.TimeoutExpired as e:
        elapsed = time.time() - start_time
        logger.debug("%s timeout after %.2fs", cmd[0], elapsed)
        return (
            COMMAND_TIMEOUT_EXIT_CODE,
            e.stdout.decode("utf-8", "replace") if e.stdout else "",
            e.stderr.decode("utf-8", "replace") if e.stderr else f"{cmd[0]} timeout",
        )
    except FileNotFoundError:
        raise SARotateError(f"{cmd[0]} binary not found on PATH.")
    except (OSError, ValueError) as e:
        raise SARotateError(f"Failed to run {cmd[0]}: {e}") from e

    elapsed = time.time() - start_time
    logger.debug("%s completed in %.2fs (rc=%d)", cmd[0], elapsed, p.returncode)
    return (
        p.returncode,
        p.stdout.decode("utf-8", "replace"),
        p.stderr.decode("utf-8", "replace"),
    )


def build_rc_command(rclone: RcloneConfig) -> List[str]:
    """Build the `rclone rc` prefix shared by every swap command."""
    cmd = [RCLONE_BINARY, "rc"]
    # Credentials only make sense as a pair.
    if rclone.user and rclone.password:
        cmd += [f"--rc-user={rclone.user}", f"--rc-pass={rclone.password}"]
    if rclone.config_path:
        cmd.append(f"--config={rclone.config_path}")
    return cmd


def build_swap_command(
    rc_command: List[str], *, address: str, remote: str, file_path: str
) -> List[str]:
    """Build the command that points a remote at a service account file."""
    return rc_command + [
        f"--rc-addr={address}",
        "backend/command",
        "command=set",
        f"fs={remote}:",
        "-o",
        f"{SERVICE_ACCOUNT_FIELD}={file_path}",
    ]


def build_config_show_command(remote: str, *, config_path: Optional[str]) -> List[str]:
    """Build the command that prints a remote's live rclone config."""
    cmd = [RCLONE_BINARY, "config", "show", f"{remote}:"]
    if config_path:
        cmd.append(f"--config={config_path}")
    return cmd


def parse_active_credential(output: str) -> Optional[str]:
    """Return the service account file name from `rclone config show` output.

    Returns None when the field is absent or has no file name.
    """
    value = parse_kv_lines(output).get(SERVICE_ACCOUNT_FIELD)
    if not value:
        return None
    return last_path_segment(value) or None


@dataclass(frozen=True)
class SwapResult:
    """File names rclone reports after a successful swap."""

    previous_file: str
    current_file: str


def extract_swap_payload(output: str) -> str:
    """Return the text after the last STDOUT: marker (or all of it)."""
    return output.split(SWAP_RESULT_MARKER)[-1].strip()


def parse_swap_result(output: str) -> SwapResult:
    """Parse the JSON payload of a successful backend/command set.

    Raises:
        ResultParseError: If the payload is not the expected JSON shape
    """
    payload = extract_swap_payload(output)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ResultParseError(f"rclone output bad format: {e}") from e

    sa_file = None
    if isinstance(data, dict) and isinstance(data.get("result"), dict):
        sa_file = data["result"].get(SERVICE_ACCOUNT_FIELD)
    if not isinstance(sa_file, dict):
        raise ResultParseError(f"rclone output bad format: missing result.{SERVICE_ACCOUNT_FIELD}")

    current = sa_file.get("current")
    previous = sa_file.get("previous")
    if not isinstance(current, str) or not isinstance(previous, str):
        raise ResultParseError("rclone output bad format: current/previous must be strings")

    return SwapResult(
        previous_file=last_path_segment(previous),
        current_file=last_path_segment(current),
    )
