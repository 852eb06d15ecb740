"""
jobsync CLI entry point.

Commands:
    jobsync sync      — Reconcile the managed jobs into the job store
    jobsync list      — Show what the job store currently holds
    jobsync doctor    — Check the managed jobs are present
    jobsync profiles  — Show the job sets jobsync can manage
    jobsync version   — Show version
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from jobsync.core.config import JobSyncConfig
from jobsync.core.errors import ConfigError, JobSyncError, MalformedStoreError

app = typer.Typer(
    name="jobsync",
    help="jobsync — keep the scheduler's job store in line with the jobs you manage.",
    add_completion=False,
)

console = Console()


def _load_config(store: Path | None = None, workspace: Path | None = None) -> JobSyncConfig:
    """Load config, letting CLI flags override file and env values."""
    overrides: dict[str, Any] = {}
    if store is not None:
        overrides.setdefault("store", {})["path"] = str(store)
    if workspace is not None:
        overrides.setdefault("sync", {})["workspace"] = str(workspace)
    try:
        return JobSyncConfig.load(overrides=overrides)
    except ConfigError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)


@app.command()
def sync(
    workspace: Path = typer.Argument(None, help="Workspace directory (default: current directory)"),
    agent_name: str = typer.Option(None, "--agent-name", "-a", help="Agent name used in job instructions"),
    profile: str = typer.Option(None, "--profile", "-p", help="Job set to manage (core, trader)"),
    force: bool = typer.Option(
        False, "--force", "-f",
        help="Overwrite managed jobs; reset an unreadable store after backing it up",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show what would change, write nothing"),
    store: Path = typer.Option(None, "--store", "-s", help="Job store file (default: ~/.openclaw/cron/jobs.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Reconcile the managed jobs into the scheduler's job store."""
    from jobsync.core.logging import parse_level, setup_logging
    from jobsync.reconcile.runner import ReconcileOptions, reconcile

    config = _load_config(store=store, workspace=workspace)

    setup_logging(
        log_dir=config.get_log_dir(),
        console_level=logging.DEBUG if verbose else parse_level(config.logging.console_level),
    )
    logger = logging.getLogger("jobsync")

    options = ReconcileOptions.from_config(
        config,
        agent_label=agent_name,
        profile=profile,
        force=True if force else None,
        dry_run=dry_run,
    )
    logger.debug(f"Options: {options}")

    try:
        result = reconcile(config.get_workspace(), config.get_store_path(), options)
    except JobSyncError as e:
        # Malformed store lands here too; its message names the backup
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)

    if result.dry_run:
        console.print("[dim]Dry run: nothing was written.[/dim]")

    console.print(
        f"[green]✓ Cron jobs configured ({len(result.created)} new, "
        f"{len(result.replaced)} replaced, {result.total} total)[/green]"
    )
    for name in result.created:
        console.print(f"  [green]+[/green] {escape(name)}")
    for name in result.replaced:
        console.print(f"  [yellow]~[/yellow] {escape(name)}")

    for warning in result.warnings:
        console.print(f"[yellow]⚠  {escape(warning)}[/yellow]")

    if result.restart_required and not result.dry_run:
        console.print("[yellow]⚠  Apply cron changes by restarting (or starting) the Gateway:[/yellow]")
        console.print("[dim]   openclaw gateway restart  # if already running[/dim]")
        console.print("[dim]   openclaw gateway start    # if not running[/dim]")


@app.command(name="list")
def list_jobs(
    store: Path = typer.Option(None, "--store", "-s", help="Job store file"),
) -> None:
    """Show the jobs in the store and which profile manages them."""
    from jobsync.scheduler.job import Job
    from jobsync.scheduler.profiles import available_profiles, profile_keys
    from jobsync.scheduler.schedule import describe_next_fire, describe_schedule
    from jobsync.store.jobs_file import JobsFile

    config = _load_config(store=store)
    jobs_file = JobsFile(config.get_store_path())

    if not jobs_file.exists():
        console.print(f"[dim]No job store at {escape(str(jobs_file.path))}.[/dim]")
        raise typer.Exit(0)

    try:
        document = jobs_file.load(backup=False)
    except MalformedStoreError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)

    owners = {key: name for name in available_profiles() for key in profile_keys(name)}

    table = Table(title=f"{jobs_file.path} (version {document.version})")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Enabled")
    table.add_column("Schedule")
    table.add_column("Next run")
    table.add_column("Managed by", style="dim")

    for entry in document.jobs:
        if not isinstance(entry, dict):
            table.add_row("-", escape(repr(entry)), "", "", "", "")
            continue
        job = Job.from_dict(entry)
        table.add_row(
            escape(job.key or "-"),
            escape(job.name),
            "yes" if job.enabled else "no",
            escape(describe_schedule(job.schedule)),
            describe_next_fire(job.schedule) if job.enabled else "-",
            owners.get(job.key, ""),
        )

    console.print(table)


@app.command()
def doctor(
    profile: str = typer.Option(None, "--profile", "-p", help="Job set to check"),
    store: Path = typer.Option(None, "--store", "-s", help="Job store file"),
) -> None:
    """Check that the managed jobs are present in the store."""
    from jobsync.reconcile.doctor import check_store

    config = _load_config(store=store)
    try:
        check = check_store(config.get_store_path(), profile or config.sync.profile)
    except JobSyncError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1)

    symbol = "[green]✓[/green]" if check.ok else "[yellow]⚠[/yellow]"
    console.print(f"{symbol} {escape(check.name)}: {escape(check.message)}")
    if not check.ok:
        raise typer.Exit(1)


@app.command()
def profiles() -> None:
    """Show the job sets jobsync can manage."""
    from jobsync.scheduler.profiles import available_profiles, generate_jobs
    from jobsync.scheduler.schedule import describe_schedule

    for name in available_profiles():
        table = Table(show_header=True, box=None)
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Schedule", style="dim")
        for job in generate_jobs("<workspace>", profile=name, now=0):
            table.add_row(job.key, escape(job.name), escape(describe_schedule(job.schedule)))
        console.print(Panel(table, title=f"[bold]{name}[/bold]", border_style="cyan"))


@app.command()
def version() -> None:
    """Show jobsync version."""
    from jobsync import __version__
    console.print(f"jobsync v{__version__}")


if __name__ == "__main__":
    app()
