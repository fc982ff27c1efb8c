from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from reposync.errors import ScanError
from reposync.models import RepoRecord
from reposync.ownership import GIT_DIRNAME, git_config_path, repo_is_owned

if TYPE_CHECKING:
    from rich.console import Console


logger = logging.getLogger(__name__)

SKIPPED_DIRNAMES = {GIT_DIRNAME, ".cache"}


def list_entries(path: Path) -> list[Path]:
    try:
        return sorted(path.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise ScanError(path, exc.strerror or str(exc)) from exc


def _is_walkable_dir(entry: Path, follow_symlinks: bool) -> bool:
    if entry.is_symlink() and not follow_symlinks:
        return False
    return entry.is_dir()


def _contains_git_dir(entries: list[Path]) -> bool:
    return any(entry.name == GIT_DIRNAME and entry.is_dir() for entry in entries)


def _dir_key(path: Path) -> tuple[int, int]:
    try:
        stat = path.stat()
    except OSError as exc:
        raise ScanError(path, exc.strerror or str(exc)) from exc
    return stat.st_dev, stat.st_ino


def _walk(
    entries: list[Path],
    identity: str,
    follow_symlinks: bool,
    visited: set[tuple[int, int]],
) -> set[RepoRecord]:
    found: set[RepoRecord] = set()

    for entry in entries:
        if entry.name in SKIPPED_DIRNAMES:
            continue
        if not _is_walkable_dir(entry, follow_symlinks):
            continue

        key = _dir_key(entry)
        if key in visited:
            logger.debug("Already visited, skipping: %s", entry)
            continue
        visited.add(key)

        children = list_entries(entry)
        if _contains_git_dir(children) and repo_is_owned(git_config_path(entry), identity):
            logger.debug("Owned repository: %s", entry)
            found.add(RepoRecord(name=entry.name, location=str(entry)))
            continue

        found |= _walk(children, identity, follow_symlinks, visited)

    return found


def discover_repos(
    root: Path,
    identity: str,
    *,
    follow_symlinks: bool = False,
) -> set[RepoRecord]:
    """Find the topmost git checkouts under ``root`` whose config mentions ``identity``.

    Unowned checkouts are walked through; owned ones are not descended into.
    Each directory is entered once, keyed by device and inode, so symlink
    loops end. A directory that cannot be listed aborts the whole scan with
    ScanError.
    """
    entries = list_entries(root)
    return _walk(entries, identity, follow_symlinks, {_dir_key(root)})


def discover_repos_with_progress(
    root: Path,
    identity: str,
    *,
    follow_symlinks: bool = False,
    console: "Console | None" = None,
) -> set[RepoRecord]:
    if console is None:
        return discover_repos(root, identity, follow_symlinks=follow_symlinks)
    with console.status(f"Scanning {root} for repositories..."):
        return discover_repos(root, identity, follow_symlinks=follow_symlinks)
