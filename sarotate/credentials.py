"""Service account discovery and usage ordering."""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .config import RemoteBinding, SARotateConfig
from .constants import CREDENTIAL_SUFFIX
from .exceptions import (
    CredentialDirectoryNotFoundError,
    EmptyCredentialSetError,
    MalformedCredentialError,
)

logger = logging.getLogger("sarotate")


@dataclass(frozen=True)
class CredentialRecord:
    """One service account JSON file."""

    file_name: str
    file_path: str
    project_id: str
    client_email: str


@dataclass
class RotationGroup:
    """A credential directory, its usage queue and the remotes it serves.

    The queue front is the next credential to activate. Membership is fixed
    at startup; only the order changes.
    """

    group_key: str
    queue: list[CredentialRecord]
    bindings: list[RemoteBinding] = field(default_factory=list)

    def front(self) -> CredentialRecord:
        return self.queue[0]

    def rotate(self) -> CredentialRecord:
        """Move the front credential to the back and return it."""
        record = self.queue.pop(0)
        self.queue.append(record)
        return record

    def move_to_back(self, record: CredentialRecord) -> None:
        self.queue.remove(record)
        self.queue.append(record)

    def find_by_file_name(self, file_name: str) -> CredentialRecord | None:
        return next((r for r in self.queue if r.file_name == file_name), None)

    def file_paths(self) -> list[str]:
        return [r.file_path for r in self.queue]


def load_credential_file(path: Path) -> CredentialRecord:
    """Parse one service account file.

    Raises:
        MalformedCredentialError: If the file is not JSON or lacks
            project_id / client_email
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedCredentialError(f"Invalid JSON in service account file {path}: {e}") from e
    except OSError as e:
        raise MalformedCredentialError(f"Failed to read service account file {path}: {e}") from e

    if not isinstance(data, dict):
        raise MalformedCredentialError(f"Service account file structure is bad: {path}")

    project_id = data.get("project_id")
    client_email = data.get("client_email")
    if not isinstance(project_id, str) or not isinstance(client_email, str):
        raise MalformedCredentialError(
            f"Missing project_id or client_email in service account file {path}"
        )

    return CredentialRecord(
        file_name=path.name,
        file_path=str(path.absolute()),
        project_id=project_id,
        client_email=client_email,
    )


def read_credential_directory(directory: str | Path) -> list[CredentialRecord]:
    """Recursively read every *.json file (any case) under directory.

    Returns an empty list when the directory holds no JSON files; callers
    decide whether that is fatal.

    Raises:
        CredentialDirectoryNotFoundError: If directory does not exist
        MalformedCredentialError: If any JSON file does not parse
    """
    root = Path(directory)
    if not root.is_dir():
        raise CredentialDirectoryNotFoundError(f"Service account directory not found: {root}")

    paths = sorted(
        p for p in root.rglob("*") if p.is_file() and p.name.lower().endswith(CREDENTIAL_SUFFIX)
    )
    records = [load_credential_file(p) for p in paths]
    logger.debug("Found %d service account file(s) in %s", len(records), root)
    return records


def warn_uneven_projects(by_project: dict[str, list[CredentialRecord]]) -> list[str]:
    """Log a warning if some projects have fewer accounts than the largest one.

    Returns:
        Sorted project ids that are below the maximum size
    """
    if not by_project:
        return []
    largest = max(len(members) for members in by_project.values())
    short = sorted(p for p, members in by_project.items() if len(members) < largest)
    if short:
        full = sorted(p for p, members in by_project.items() if len(members) == largest)
        logger.warning(
            "amount of service accounts in projects %s is lower than projects %s",
            ", ".join(short),
            ", ".join(full),
        )
    return short


def build_usage_order(records: Iterable[CredentialRecord]) -> list[CredentialRecord]:
    """Order credentials round-robin across projects.

    Projects are visited in project_id order; within a project accounts are
    taken in client_email order. The i-th account of every project is emitted
    before any project's (i+1)-th account.
    """
    by_project: dict[str, list[CredentialRecord]] = defaultdict(list)
    for record in records:
        by_project[record.project_id].append(record)
    if not by_project:
        return []

    projects = [
        sorted(by_project[p], key=lambda r: (r.client_email, r.file_path))
        for p in sorted(by_project)
    ]
    warn_uneven_projects(dict(by_project))

    largest = max(len(members) for members in projects)
    order: list[CredentialRecord] = []
    for i in range(largest):
        for members in projects:
            if i < len(members):
                order.append(members[i])
    return order


def build_rotation_groups(config: SARotateConfig) -> list[RotationGroup]:
    """Read every configured credential directory and build its usage queue.

    Raises:
        CredentialDirectoryNotFoundError: If a directory is missing
        EmptyCredentialSetError: If a directory yields no credential files
        MalformedCredentialError: If a credential file does not parse
    """
    groups: list[RotationGroup] = []
    for group_key, bindings in config.remote_config.items():
        records = read_credential_directory(group_key)
        if not records:
            raise EmptyCredentialSetError(f"No service account files found in {group_key}")
        queue = build_usage_order(records)
        logger.info(
            "Group %s: %d service account(s) for remote(s) %s",
            group_key,
            len(queue),
            ", ".join(b.remote for b in bindings),
        )
        groups.append(RotationGroup(group_key=group_key, queue=queue, bindings=list(bindings)))
    return groups
