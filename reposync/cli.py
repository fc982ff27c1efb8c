from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from reposync.config import ReposyncConfig, apply_overrides, load_config
from reposync.errors import LocationConflictError, ReposyncError
from reposync.models import RepoRecord, build_inventory
from reposync.reconcile import ReconcileResult
from reposync.remote import CommandRemote
from reposync.scanner import discover_repos_with_progress
from reposync.sync_service import preview_status, render_aliases_from_snapshot, run_sync


app = typer.Typer(help="Inventory, sync and alias your own git checkouts.")
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _resolve_config(
    config_file: str | None,
    *,
    root: str | None = None,
    snapshot: str | None = None,
    aliases: str | None = None,
    identity: str | None = None,
    style: str | None = None,
    sync_command: str | None = None,
) -> ReposyncConfig:
    base = load_config(Path(config_file).expanduser() if config_file else None)
    return apply_overrides(
        base,
        root=root,
        snapshot_file=snapshot,
        alias_file=aliases,
        identity=identity,
        alias_style=style,
        sync_command=sync_command,
    )


def _render_records(title: str, records: list[RepoRecord]) -> None:
    if not records:
        return

    table = Table(title=title)
    table.add_column("Name")
    table.add_column("Location")
    for record in records:
        table.add_row(record.name, record.location)

    console.print(table)


def _render_name_summary(title: str, names: list[str], style: str) -> None:
    if not names:
        return
    console.print(Text(f"{title} ({len(names)}):", style=style))
    for name in names:
        console.print(f"  {name}")


def _render_conflicts(exc: LocationConflictError) -> None:
    table = Table(title="Conflicting locations", title_style="red")
    table.add_column("Name")
    table.add_column("Found at")
    table.add_column("Snapshot says")
    for conflict in exc.conflicts:
        table.add_row(conflict.name, conflict.discovered_location, conflict.persisted_location)
    console.print(table)
    console.print("[red]Resolve the conflict manually; nothing was cloned, pulled or written.[/red]")


def _render_run_result(result: ReconcileResult, config: ReposyncConfig) -> None:
    _render_name_summary("Cloned", result.cloned, "green")
    _render_name_summary("Synced", result.pulled, "green")
    _render_name_summary("Failed (left unsynced)", result.failed, "yellow")
    console.print(f"Snapshot updated: {len(result.merged)} repo(s) in {config.snapshot_path}")
    console.print(f"Aliases written: {config.alias_path}")


ConfigOption = typer.Option(None, "--config", help="Path to a JSON config file (default ~/.reposync.json).")
RootOption = typer.Option(None, "--root", help="Directory to scan (default: home directory).")
IdentityOption = typer.Option(None, "--identity", help="Token that marks a checkout as yours.")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show debug logging.")


@app.command()
def run(
    config_file: str | None = ConfigOption,
    root: str | None = RootOption,
    snapshot: str | None = typer.Option(None, "--snapshot", help="Snapshot JSON file."),
    aliases: str | None = typer.Option(None, "--aliases", help="Generated alias file."),
    identity: str | None = IdentityOption,
    style: str | None = typer.Option(None, "--style", help="Alias syntax: fish or bash."),
    sync_command: str | None = typer.Option(
        None,
        "--sync-command",
        help="How existing checkouts are refreshed: pull (git pull) or gh (gh repo sync).",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log clone/pull commands instead of running them."),
    verbose: bool = VerboseOption,
) -> None:
    """Scan, clone missing repos, pull everything, then rewrite the snapshot and aliases."""
    _configure_logging(verbose)
    try:
        config = _resolve_config(
            config_file,
            root=root,
            snapshot=snapshot,
            aliases=aliases,
            identity=identity,
            style=style,
            sync_command=sync_command,
        )
        remote = CommandRemote(sync_command=config.sync_command, dry_run=dry_run)
        result = run_sync(config, remote=remote, console=console)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted.[/yellow] Snapshot and aliases were not updated.")
        raise typer.Exit(code=130)
    except LocationConflictError as exc:
        _render_conflicts(exc)
        raise typer.Exit(code=1)
    except ReposyncError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    _render_run_result(result.reconcile, config)


@app.command()
def scan(
    config_file: str | None = ConfigOption,
    root: str | None = RootOption,
    identity: str | None = IdentityOption,
    verbose: bool = VerboseOption,
) -> None:
    """List the owned repositories found under the root."""
    _configure_logging(verbose)
    try:
        config = _resolve_config(config_file, root=root, identity=identity)
        found = build_inventory(
            discover_repos_with_progress(
                config.root_path,
                config.identity,
                follow_symlinks=config.follow_symlinks,
                console=console,
            )
        )
    except ReposyncError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if not found:
        console.print(f"[yellow]No repositories owned by {config.identity!r} under {config.root_path}.[/yellow]")
        return
    _render_records("Owned repositories", [found[name] for name in sorted(found)])


@app.command()
def status(
    config_file: str | None = ConfigOption,
    root: str | None = RootOption,
    snapshot: str | None = typer.Option(None, "--snapshot", help="Snapshot JSON file."),
    identity: str | None = IdentityOption,
    verbose: bool = VerboseOption,
) -> None:
    """Compare the filesystem with the snapshot without cloning, pulling or writing."""
    _configure_logging(verbose)
    try:
        config = _resolve_config(config_file, root=root, snapshot=snapshot, identity=identity)
        plan = preview_status(config, console=console)
    except ReposyncError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    _render_records("Missing locally (would clone)", plan.missing)
    _render_records("New (not in snapshot)", plan.new)
    if plan.conflicts:
        _render_conflicts(LocationConflictError(plan.conflicts))
        raise typer.Exit(code=1)
    if not plan.has_changes:
        console.print("[green]Snapshot matches the filesystem.[/green]")
    console.print(f"Tracked and present: {len(plan.tracked)} repo(s)")


@app.command(name="aliases")
def aliases_command(
    config_file: str | None = ConfigOption,
    snapshot: str | None = typer.Option(None, "--snapshot", help="Snapshot JSON file."),
    aliases: str | None = typer.Option(None, "--aliases", help="Generated alias file."),
    style: str | None = typer.Option(None, "--style", help="Alias syntax: fish or bash."),
    verbose: bool = VerboseOption,
) -> None:
    """Regenerate the alias file from the snapshot alone."""
    _configure_logging(verbose)
    try:
        config = _resolve_config(config_file, snapshot=snapshot, aliases=aliases, style=style)
        count = render_aliases_from_snapshot(config)
    except ReposyncError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Aliases written[/green] for {count} repo(s) to {config.alias_path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
