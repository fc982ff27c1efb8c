from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from reposync.errors import DuplicateRepoError


@dataclass(slots=True, frozen=True)
class RepoRecord:
    name: str
    location: str


Inventory = dict[str, RepoRecord]


def build_inventory(records: Iterable[RepoRecord]) -> Inventory:
    inventory: Inventory = {}
    for record in records:
        existing = inventory.get(record.name)
        if existing is not None and existing.location != record.location:
            raise DuplicateRepoError(
                record.name, sorted({existing.location, record.location})
            )
        inventory[record.name] = record
    return inventory


def sorted_records(inventory: Inventory) -> list[RepoRecord]:
    return [inventory[name] for name in sorted(inventory)]
