from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest


IDENTITY = "pablothedeveloper"


def _make_repo(parent: Path, name: str, *, owner: str = IDENTITY) -> Path:
    repo = parent / name
    git_dir = repo / ".git"
    git_dir.mkdir(parents=True)
    (git_dir / "config").write_text(
        "[core]\n\trepositoryformatversion = 0\n"
        '[remote "origin"]\n'
        f"\turl = git@github.com:{owner}/{name}.git\n",
        encoding="utf-8",
    )
    return repo


class RecordingRemote:
    def __init__(self, failing: set[str] | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.failing = failing or set()

    def ensure_cloned(self, name: str, location: str) -> bool:
        self.calls.append(("clone", name, location))
        return location not in self.failing

    def pull(self, location: str) -> bool:
        self.calls.append(("pull", location))
        return location not in self.failing

    def sync(self, location: str) -> bool:
        self.calls.append(("sync", location))
        return location not in self.failing


@pytest.fixture()
def identity() -> str:
    return IDENTITY


@pytest.fixture()
def make_repo() -> Callable[..., Path]:
    """Create a checkout with a `.git/config` whose origin belongs to ``owner``."""
    return _make_repo


@pytest.fixture()
def make_remote() -> type[RecordingRemote]:
    return RecordingRemote


@pytest.fixture()
def remote() -> RecordingRemote:
    return RecordingRemote()
