"""Shared pytest fixtures for SARotate tests."""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from sarotate.config import (
    NotificationConfig,
    RcloneConfig,
    RemoteBinding,
    SARotateConfig,
)
from sarotate.credentials import CredentialRecord, RotationGroup


@pytest.fixture
def tmp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def write_sa() -> Callable[..., Path]:
    """Return a helper that writes a service account JSON file."""

    def _write(directory: Path, name: str, project_id: str, client_email: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(
            json.dumps(
                {
                    "type": "service_account",
                    "project_id": project_id,
                    "client_email": client_email,
                    "private_key_id": "abc123",
                }
            )
        )
        return path

    return _write


@pytest.fixture
def sa_dir(tmp_dir: Path, write_sa) -> Path:
    """Directory with project A (a1, a2) and project B (b1)."""
    d = tmp_dir / "sa"
    write_sa(d, "a1.json", "project-a", "a1@project-a.iam.gserviceaccount.com")
    write_sa(d, "a2.json", "project-a", "a2@project-a.iam.gserviceaccount.com")
    write_sa(d, "b1.json", "project-b", "b1@project-b.iam.gserviceaccount.com")
    return d


def _record(name: str, project_id: str) -> CredentialRecord:
    return CredentialRecord(
        file_name=f"{name}.json",
        file_path=f"/opt/sa/{name}.json",
        project_id=project_id,
        client_email=f"{name}@{project_id}.iam.gserviceaccount.com",
    )


@pytest.fixture
def make_record() -> Callable[[str, str], CredentialRecord]:
    """Return a helper that builds a CredentialRecord without touching the filesystem."""
    return _record


@pytest.fixture
def records() -> list[CredentialRecord]:
    """Records a1, a2 (project-a) and b1 (project-b) in arbitrary order."""
    return [_record("b1", "project-b"), _record("a2", "project-a"), _record("a1", "project-a")]


@pytest.fixture
def rclone_config() -> RcloneConfig:
    return RcloneConfig(config_path=None, user=None, password=None, sleep_time=300, timeout=60)


@pytest.fixture
def group() -> RotationGroup:
    """Group [a1, b1, a2] serving remotes gdrive and tdrive."""
    return RotationGroup(
        group_key="/opt/sa",
        queue=[
            _record("a1", "project-a"),
            _record("b1", "project-b"),
            _record("a2", "project-a"),
        ],
        bindings=[
            RemoteBinding(remote="gdrive", address="localhost:5572"),
            RemoteBinding(remote="tdrive", address="localhost:5573"),
        ],
    )


@pytest.fixture
def sarotate_config(sa_dir: Path, rclone_config: RcloneConfig) -> SARotateConfig:
    return SARotateConfig(
        rclone=rclone_config,
        remote_config={str(sa_dir): [RemoteBinding(remote="gdrive", address="localhost:5572")]},
        notification=NotificationConfig(errors_only=False, apprise=["discord://id/token"]),
    )


@pytest.fixture
def config_file(tmp_dir: Path, sa_dir: Path) -> Path:
    """Write a YAML config pointing at sa_dir."""
    path = tmp_dir / "config.yaml"
    path.write_text(
        f"""rclone:
  sleeptime: 300
  timeout: 60
remotes:
  {sa_dir}:
    gdrive: localhost:5572
notification:
  errors_only: n
  apprise: []
"""
    )
    return path


def _swap_output(previous: str, current: str) -> str:
    payload = {
        "result": {
            "service_account_file": {
                "current": current,
                "previous": previous,
            }
        }
    }
    return "STDOUT:" + json.dumps(payload)


@pytest.fixture
def swap_output() -> Callable[[str, str], str]:
    """Return a helper that builds rclone rc output for a successful backend/command set."""
    return _swap_output


@pytest.fixture
def sample_config_show_output() -> str:
    """Sample `rclone config show gdrive:` output."""
    return """[gdrive]
type = drive
scope = drive
service_account_file = /opt/sa/a1.json
team_drive = 0ABCDEF
"""
