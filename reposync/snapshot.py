from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable

from reposync.errors import DuplicateRepoError, SnapshotError
from reposync.models import Inventory, RepoRecord, build_inventory


SNAPSHOT_FILE_MODE = 0o644

# Snapshots written by the earlier tool store the location under "path".
LEGACY_LOCATION_KEY = "path"


def _record_from_entry(entry: object, index: int, path: Path) -> RepoRecord:
    if not isinstance(entry, dict):
        raise SnapshotError(f"Snapshot {path}: entry {index} is not an object.")
    name = entry.get("name")
    location = entry.get("location", entry.get(LEGACY_LOCATION_KEY))
    if not isinstance(name, str) or not name:
        raise SnapshotError(f"Snapshot {path}: entry {index} has no valid `name`.")
    if not isinstance(location, str) or not location:
        raise SnapshotError(f"Snapshot {path}: entry {index} ({name}) has no valid `location`.")
    return RepoRecord(name=name, location=location)


def load_snapshot(path: Path) -> Inventory:
    if not path.exists():
        return {}

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise SnapshotError(f"Cannot read snapshot {path}: {exc}") from exc

    if not isinstance(data, list):
        raise SnapshotError(f"Snapshot {path} must contain a JSON array.")

    records = [_record_from_entry(entry, index, path) for index, entry in enumerate(data)]
    try:
        return build_inventory(records)
    except DuplicateRepoError as exc:
        raise SnapshotError(f"Snapshot {path}: {exc}") from exc


def _target_mode(path: Path) -> int:
    try:
        return path.stat().st_mode & 0o777
    except FileNotFoundError:
        return SNAPSHOT_FILE_MODE


def save_snapshot(path: Path, records: Inventory | Iterable[RepoRecord]) -> Path:
    values = records.values() if isinstance(records, dict) else records
    payload = [
        {"name": record.name, "location": record.location}
        for record in sorted(values, key=lambda r: r.name)
    ]

    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as fh:
            tmp_name = fh.name
            json.dump(payload, fh, indent=2)
            fh.write("\n")
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise SnapshotError(f"Cannot write snapshot {path}: {exc}") from exc
    return path
