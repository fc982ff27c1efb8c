from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reposync.aliases import render_aliases, write_alias_file
from reposync.config import ReposyncConfig
from reposync.models import Inventory, build_inventory
from reposync.reconcile import ReconcilePlan, ReconcileResult, plan_reconcile, reconcile
from reposync.remote import RemoteSync
from reposync.scanner import discover_repos_with_progress
from reposync.snapshot import load_snapshot, save_snapshot

if TYPE_CHECKING:
    from rich.console import Console


@dataclass(slots=True)
class SyncRunResult:
    reconcile: ReconcileResult
    snapshot_count: int
    alias_count: int


def _load_and_discover(
    config: ReposyncConfig, *, console: "Console | None" = None
) -> tuple[Inventory, Inventory]:
    persisted = load_snapshot(config.snapshot_path)
    discovered = build_inventory(
        discover_repos_with_progress(
            config.root_path,
            config.identity,
            follow_symlinks=config.follow_symlinks,
            console=console,
        )
    )
    return discovered, persisted


def preview_status(config: ReposyncConfig, *, console: "Console | None" = None) -> ReconcilePlan:
    discovered, persisted = _load_and_discover(config, console=console)
    return plan_reconcile(discovered, persisted)


def run_sync(
    config: ReposyncConfig,
    *,
    remote: RemoteSync,
    console: "Console | None" = None,
) -> SyncRunResult:
    # Artifacts are written last so a fatal error leaves the previous ones in place.
    discovered, persisted = _load_and_discover(config, console=console)
    result = reconcile(discovered, persisted, remote, console=console)

    save_snapshot(config.snapshot_path, result.merged)
    write_alias_file(config.alias_path, render_aliases(result.merged, config.alias_style))

    return SyncRunResult(
        reconcile=result,
        snapshot_count=len(result.merged),
        alias_count=len(result.merged),
    )


def render_aliases_from_snapshot(config: ReposyncConfig) -> int:
    inventory = load_snapshot(config.snapshot_path)
    write_alias_file(config.alias_path, render_aliases(inventory.values(), config.alias_style))
    return len(inventory)
