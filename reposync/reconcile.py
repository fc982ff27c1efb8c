from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from reposync.errors import LocationConflict, LocationConflictError
from reposync.models import Inventory, RepoRecord, sorted_records
from reposync.remote import RemoteSync

if TYPE_CHECKING:
    from rich.console import Console


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconcilePlan:
    missing: list[RepoRecord]
    new: list[RepoRecord]
    tracked: list[RepoRecord]
    conflicts: list[LocationConflict]

    @property
    def has_changes(self) -> bool:
        return bool(self.missing or self.new or self.conflicts)


@dataclass(slots=True)
class ReconcileResult:
    merged: list[RepoRecord]
    cloned: list[str]
    pulled: list[str]
    failed: list[str]


def find_conflicts(discovered: Inventory, persisted: Inventory) -> list[LocationConflict]:
    return [
        LocationConflict(
            name=name,
            discovered_location=discovered[name].location,
            persisted_location=persisted[name].location,
        )
        for name in sorted(discovered.keys() & persisted.keys())
        if discovered[name].location != persisted[name].location
    ]


def plan_reconcile(discovered: Inventory, persisted: Inventory) -> ReconcilePlan:
    return ReconcilePlan(
        missing=[persisted[name] for name in sorted(persisted.keys() - discovered.keys())],
        new=[discovered[name] for name in sorted(discovered.keys() - persisted.keys())],
        tracked=[discovered[name] for name in sorted(discovered.keys() & persisted.keys())],
        conflicts=find_conflicts(discovered, persisted),
    )


def merge_inventories(discovered: Inventory, persisted: Inventory) -> list[RepoRecord]:
    merged: Inventory = dict(persisted)
    for name, record in discovered.items():
        merged.setdefault(name, record)
    return sorted_records(merged)


def reconcile(
    discovered: Inventory,
    persisted: Inventory,
    remote: RemoteSync,
    *,
    console: "Console | None" = None,
) -> ReconcileResult:
    """Clone what the snapshot expects but is missing, pull what exists, return the union.

    Location conflicts are checked before any clone or pull runs.
    """
    conflicts = find_conflicts(discovered, persisted)
    if conflicts:
        raise LocationConflictError(conflicts)

    plan = plan_reconcile(discovered, persisted)
    cloned: list[str] = []
    pulled: list[str] = []
    failed: list[str] = []

    for record in plan.missing:
        if console is not None:
            console.print(f"Cloning missing [bold]{record.name}[/bold] into {record.location}")
        logger.info("Cloning %s into %s", record.name, record.location)
        if remote.ensure_cloned(record.name, record.location):
            cloned.append(record.name)
        else:
            failed.append(record.name)

    for record in sorted_records(discovered):
        if console is not None:
            console.print(f"Syncing [bold]{record.name}[/bold] at {record.location}")
        logger.info("Pulling %s at %s", record.name, record.location)
        if remote.pull(record.location):
            pulled.append(record.name)
        else:
            failed.append(record.name)

    return ReconcileResult(
        merged=merge_inventories(discovered, persisted),
        cloned=cloned,
        pulled=pulled,
        failed=sorted(failed),
    )
