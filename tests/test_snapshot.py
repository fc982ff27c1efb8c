from __future__ import annotations

import json
import stat
from pathlib import Path

import pytest

from reposync.errors import SnapshotError
from reposync.models import RepoRecord
from reposync.snapshot import load_snapshot, save_snapshot


def test_missing_snapshot_is_empty(tmp_path: Path) -> None:
    assert load_snapshot(tmp_path / "repos.json") == {}


def test_save_then_load_preserves_inventory(tmp_path: Path) -> None:
    path = tmp_path / "repos.json"
    inventory = {
        "zeta": RepoRecord("zeta", "/home/dev/zeta"),
        "alpha": RepoRecord("alpha", "/home/dev/work/alpha"),
    }

    save_snapshot(path, inventory)

    assert load_snapshot(path) == inventory


def test_saved_snapshot_is_sorted_json_array(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "repos.json"
    save_snapshot(path, [RepoRecord("b", "/b"), RepoRecord("a", "/a")])

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [{"name": "a", "location": "/a"}, {"name": "b", "location": "/b"}]
    assert list(path.parent.iterdir()) == [path]


def test_empty_inventory_saves_empty_list(tmp_path: Path) -> None:
    path = tmp_path / "repos.json"
    save_snapshot(path, {})
    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_unknown_fields_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "repos.json"
    path.write_text(
        json.dumps([{"name": "foo", "location": "/a/foo", "stars": 3}]), encoding="utf-8"
    )
    assert load_snapshot(path) == {"foo": RepoRecord("foo", "/a/foo")}


def test_legacy_path_key_is_accepted(tmp_path: Path) -> None:
    path = tmp_path / "repos.json"
    path.write_text(json.dumps([{"name": "foo", "path": "/a/foo"}]), encoding="utf-8")
    assert load_snapshot(path) == {"foo": RepoRecord("foo", "/a/foo")}


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"name": "foo", "location": "/a"}',
        '["foo"]',
        '[{"name": "foo"}]',
        '[{"location": "/a"}]',
        '[{"name": "foo", "location": 7}]',
        '[{"name": "foo", "location": "/a"}, {"name": "foo", "location": "/b"}]',
    ],
)
def test_malformed_snapshot_raises(tmp_path: Path, content: str) -> None:
    path = tmp_path / "repos.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(SnapshotError):
        load_snapshot(path)


def test_save_failure_raises_and_keeps_old_file(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(SnapshotError):
        save_snapshot(blocker / "repos.json", [RepoRecord("a", "/a")])
    assert blocker.read_text(encoding="utf-8") == "x"


def test_new_snapshot_is_world_readable(tmp_path: Path) -> None:
    path = tmp_path / "repos.json"
    save_snapshot(path, [RepoRecord("a", "/a")])

    assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_existing_snapshot_keeps_its_mode(tmp_path: Path) -> None:
    path = tmp_path / "repos.json"
    path.write_text("[]\n", encoding="utf-8")
    path.chmod(0o600)

    save_snapshot(path, [RepoRecord("a", "/a")])

    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert load_snapshot(path) == {"a": RepoRecord("a", "/a")}
