from __future__ import annotations

import pytest

from reposync.errors import LocationConflictError
from reposync.models import RepoRecord
from reposync.reconcile import find_conflicts, plan_reconcile, reconcile


def _inv(*pairs: tuple[str, str]) -> dict[str, RepoRecord]:
    return {name: RepoRecord(name, location) for name, location in pairs}


def test_empty_inputs_make_no_calls(remote) -> None:
    result = reconcile({}, {}, remote)

    assert result.merged == []
    assert remote.calls == []


def test_missing_repos_are_cloned_and_discovered_are_pulled(remote) -> None:
    persisted = _inv(("gone", "/home/dev/gone"), ("both", "/home/dev/both"))
    discovered = _inv(("both", "/home/dev/both"), ("fresh", "/home/dev/src/fresh"))

    result = reconcile(discovered, persisted, remote)

    assert remote.calls == [
        ("clone", "gone", "/home/dev/gone"),
        ("pull", "/home/dev/both"),
        ("pull", "/home/dev/src/fresh"),
    ]
    assert [r.name for r in result.merged] == ["both", "fresh", "gone"]
    assert result.cloned == ["gone"]
    assert result.pulled == ["both", "fresh"]
    assert result.failed == []


def test_merged_keys_are_union(remote) -> None:
    persisted = _inv(("a", "/a"), ("b", "/b"))
    discovered = _inv(("b", "/b"), ("c", "/c"), ("d", "/d"))

    result = reconcile(discovered, persisted, remote)

    assert {r.name for r in result.merged} == set(persisted) | set(discovered)


def test_conflict_aborts_before_any_remote_call(remote) -> None:
    persisted = _inv(("foo", "/a/foo"), ("other", "/x/other"))
    discovered = _inv(("foo", "/b/foo"))

    with pytest.raises(LocationConflictError) as excinfo:
        reconcile(discovered, persisted, remote)

    assert remote.calls == []
    [conflict] = excinfo.value.conflicts
    assert conflict.name == "foo"
    assert conflict.discovered_location == "/b/foo"
    assert conflict.persisted_location == "/a/foo"


def test_conflicts_found_only_for_differing_locations() -> None:
    persisted = _inv(("same", "/s"), ("moved", "/old"), ("only-persisted", "/p"))
    discovered = _inv(("same", "/s"), ("moved", "/new"), ("only-found", "/f"))

    assert [c.name for c in find_conflicts(discovered, persisted)] == ["moved"]
    assert find_conflicts(_inv(("same", "/s")), _inv(("same", "/s"))) == []


def test_remote_failures_do_not_stop_the_run(make_remote) -> None:
    remote = make_remote(failing={"/home/dev/gone", "/home/dev/broken"})
    persisted = _inv(("gone", "/home/dev/gone"))
    discovered = _inv(("broken", "/home/dev/broken"), ("ok", "/home/dev/ok"))

    result = reconcile(discovered, persisted, remote)

    assert result.failed == ["broken", "gone"]
    assert result.pulled == ["ok"]
    assert [r.name for r in result.merged] == ["broken", "gone", "ok"]


def test_plan_reports_missing_new_and_tracked() -> None:
    plan = plan_reconcile(
        _inv(("both", "/b"), ("new", "/n")),
        _inv(("both", "/b"), ("missing", "/m")),
    )

    assert [r.name for r in plan.missing] == ["missing"]
    assert [r.name for r in plan.new] == ["new"]
    assert [r.name for r in plan.tracked] == ["both"]
    assert plan.conflicts == []
    assert plan.has_changes
