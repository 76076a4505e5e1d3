"""SARotate configuration loading.

The config file is YAML with three sections::

    rclone:
      rclone_config: /home/user/.config/rclone/rclone.conf
      rc_user: user
      rc_pass: pass
      sleeptime: 300
    remotes:
      /opt/sa/group1:
        gdrive: localhost:5572
    notification:
      errors_only: y
      apprise:
        - discord://webhook_id/webhook_token
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .constants import DEFAULT_COMMAND_TIMEOUT_S, DEFAULT_SLEEP_TIME_S
from .exceptions import UserError
from .utils import as_bool


@dataclass
class RcloneConfig:
    """Access to the rclone control endpoint."""

    config_path: str | None = None
    user: str | None = None
    password: str | None = None
    sleep_time: int = DEFAULT_SLEEP_TIME_S
    timeout: int = DEFAULT_COMMAND_TIMEOUT_S


@dataclass(frozen=True)
class RemoteBinding:
    """One rclone remote and the rc address that controls it."""

    remote: str
    address: str


@dataclass
class NotificationConfig:
    """Apprise targets and severity floor."""

    errors_only: bool = False
    apprise: list[str] = field(default_factory=list)

    @property
    def targets(self) -> list[str]:
        """Configured targets with blank entries dropped."""
        return [t for t in self.apprise if t and t.strip()]


@dataclass
class SARotateConfig:
    """Parsed configuration file."""

    rclone: RcloneConfig
    remote_config: dict[str, list[RemoteBinding]]
    notification: NotificationConfig


def _section(data: dict[str, Any], name: str, *, required: bool = False) -> dict[str, Any]:
    value = data.get(name)
    if value is None:
        if required:
            raise UserError(f"Config is missing the '{name}' section")
        return {}
    if not isinstance(value, dict):
        raise UserError(f"Config section '{name}' must be a mapping")
    return value


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _positive_int(value: Any, name: str, default: int) -> int:
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise UserError(f"rclone.{name} must be an integer, got {value!r}") from None
    if number <= 0:
        raise UserError(f"rclone.{name} must be positive, got {number}")
    return number


def normalize_group_key(directory: str) -> str:
    """Return the absolute form of a credential directory path."""
    return str(Path(directory).expanduser().absolute())


def parse_remote_address(remote: str, value: Any) -> str:
    """Return the rc address for a remote.

    A list of addresses is accepted, but only the first one is used since one
    credential set serves one endpoint.
    """
    if isinstance(value, list):
        value = value[0] if value else None
    address = _optional_str(value)
    if address is None:
        raise UserError(f"Remote '{remote}' has no rc address configured")
    return address


def parse_remotes(section: dict[str, Any]) -> dict[str, list[RemoteBinding]]:
    """Parse the remotes section into group key -> bindings."""
    if not section:
        raise UserError("Config 'remotes' section must list at least one credential directory")

    remote_config: dict[str, list[RemoteBinding]] = {}
    for directory, remotes in section.items():
        if not isinstance(remotes, dict) or not remotes:
            raise UserError(f"Credential directory '{directory}' must map remote names to addresses")
        bindings = [
            RemoteBinding(remote=str(remote), address=parse_remote_address(str(remote), value))
            for remote, value in remotes.items()
        ]
        group_key = normalize_group_key(str(directory))
        if group_key in remote_config:
            raise UserError(f"Credential directory '{directory}' is listed more than once")
        remote_config[group_key] = bindings
    return remote_config


def parse_config(data: Any) -> SARotateConfig:
    """Build a SARotateConfig from already-parsed YAML data."""
    if not isinstance(data, dict):
        raise UserError("Config file must contain a YAML mapping")

    rclone = _section(data, "rclone")
    notification = _section(data, "notification")

    apprise = notification.get("apprise") or []
    if isinstance(apprise, str):
        apprise = [apprise]
    if not isinstance(apprise, list):
        raise UserError("notification.apprise must be a list of targets")

    return SARotateConfig(
        rclone=RcloneConfig(
            config_path=_optional_str(rclone.get("rclone_config")),
            user=_optional_str(rclone.get("rc_user")),
            password=_optional_str(rclone.get("rc_pass")),
            sleep_time=_positive_int(rclone.get("sleeptime"), "sleeptime", DEFAULT_SLEEP_TIME_S),
            timeout=_positive_int(rclone.get("timeout"), "timeout", DEFAULT_COMMAND_TIMEOUT_S),
        ),
        remote_config=parse_remotes(_section(data, "remotes", required=True)),
        notification=NotificationConfig(
            errors_only=as_bool(notification.get("errors_only")),
            apprise=[str(t) for t in apprise if t is not None],
        ),
    )


def load_config(config_path: Path) -> SARotateConfig:
    """Load and validate the YAML config file.

    Raises:
        UserError: If the file is missing, is not valid YAML, or has a bad shape
    """
    if not config_path.is_file():
        raise UserError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise UserError(f"Invalid YAML in {config_path}: {e}") from e

    return parse_config(data)
