from __future__ import annotations

from dataclasses import dataclass


class ReposyncError(Exception):
    """Base class for errors that stop a reposync run."""


class ConfigError(ReposyncError):
    pass


class ScanError(ReposyncError):
    def __init__(self, path, message: str) -> None:
        super().__init__(f"Cannot list {path}: {message}")
        self.path = path


class SnapshotError(ReposyncError):
    pass


class AliasWriteError(ReposyncError):
    pass


class DuplicateRepoError(ReposyncError):
    def __init__(self, name: str, locations: list[str]) -> None:
        joined = ", ".join(locations)
        super().__init__(f"Repository name {name!r} maps to more than one location: {joined}")
        self.name = name
        self.locations = locations


@dataclass(slots=True, frozen=True)
class LocationConflict:
    name: str
    discovered_location: str
    persisted_location: str


class LocationConflictError(ReposyncError):
    """Raised when a repository was found somewhere other than where the snapshot expects it.

    The run is not resolved automatically; callers may catch this and decide
    which location to keep.
    """

    def __init__(self, conflicts: list[LocationConflict]) -> None:
        self.conflicts = conflicts
        lines = [
            f"{c.name}: found at {c.discovered_location}, snapshot says {c.persisted_location}"
            for c in conflicts
        ]
        super().__init__(
            "Conflicting repository locations; fix them manually:\n  " + "\n  ".join(lines)
        )
