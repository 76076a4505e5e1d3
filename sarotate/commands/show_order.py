"""SARotate show-order command implementation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from ..config import load_config
from ..credentials import RotationGroup, build_rotation_groups
from ..recovery import RecoveryResult, recover_groups

if TYPE_CHECKING:
    from ..cli_types import ShowOrderArgs


def group_to_dict(group: RotationGroup, recovery: list[RecoveryResult]) -> dict[str, Any]:
    """Return a JSON-friendly view of a group's queue."""
    return {
        "group": group.group_key,
        "remotes": {b.remote: b.address for b in group.bindings},
        "order": [
            {
                "file_name": r.file_name,
                "project_id": r.project_id,
                "client_email": r.client_email,
            }
            for r in group.queue
        ],
        "recovery": [
            {
                "remote": res.remote,
                "active_file": res.active_file,
                "recovered": res.recovered,
                "error": res.error.value if res.error else None,
            }
            for res in recovery
        ],
    }


def format_group(group: RotationGroup, recovery: list[RecoveryResult]) -> list[str]:
    lines = [f"{group.group_key} ({', '.join(b.remote for b in group.bindings)})"]
    for res in recovery:
        if res.recovered:
            lines.append(f"  remote {res.remote}: currently {res.active_file}")
        else:
            lines.append(f"  remote {res.remote}: not recovered ({res.detail})")
    width = len(str(len(group.queue)))
    for i, record in enumerate(group.queue, start=1):
        lines.append(f"  {i:>{width}}. {record.file_name}  {record.project_id}  {record.client_email}")
    return lines


def cmd_show_order(args: ShowOrderArgs) -> None:
    """Print the usage order of every group without swapping anything."""
    config = load_config(Path(args.config))
    groups = build_rotation_groups(config)

    recovery_by_group: dict[str, list[RecoveryResult]] = {g.group_key: [] for g in groups}
    if args.recover:
        for group in groups:
            recovery_by_group[group.group_key] = recover_groups([group], config.rclone)

    if args.json:
        payload = [group_to_dict(g, recovery_by_group[g.group_key]) for g in groups]
        click.echo(json.dumps(payload, indent=2))
        return

    for n, group in enumerate(groups):
        if n:
            click.echo()
        for line in format_group(group, recovery_by_group[group.group_key]):
            click.echo(line)
