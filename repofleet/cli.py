"""CLI entry point — sync, check, analyze, pages."""

import json
from pathlib import Path
from typing import Optional

import click
import typer

from .aggregate import aggregate
from .config import FleetConfig, load_config
from .discovery import sorted_repos
from .drift import probe_fleet, to_report
from .errors import ConfigError, DiscoveryError, ListingFailure
from .forge import ForgeClient
from .format import render_drift, render_failures, render_pages, render_sync
from .logging import configure_logging
from .models import Probe
from .pages import audit_pages
from .runner import CommandRunner, SubprocessRunner
from .scheduler import SequentialScheduler, make_scheduler
from .sync import sync_fleet
from .workflows import analyze_failures

app = typer.Typer(help="Keep a fleet of git clones in sync and audit their CI on GitHub.")


def _err(msg: str) -> None:
    """Raise a styled usage error (exit 2)."""
    raise click.BadParameter(msg)


def _fatal(msg: str) -> None:
    """Enumeration-level failure: message on stderr, exit 1."""
    typer.echo(click.style(f"Error: {msg}", fg="red"), err=True)
    raise typer.Exit(1)


def _make_runner(config: FleetConfig) -> CommandRunner:
    return SubprocessRunner(timeout=config.timeout)


def _config(ctx: typer.Context) -> FleetConfig:
    return ctx.obj


def _require_org(config: FleetConfig) -> str:
    if not config.org:
        _err("No organization configured. Pass --org, set REPOFLEET_ORG, or add 'org:' to the config file.")
    return config.org


def _run(scheduler: SequentialScheduler, fn):
    """Run fn; on Ctrl-C cancel remaining units and exit 130."""
    try:
        return fn()
    except KeyboardInterrupt:
        scheduler.cancel()
        typer.echo("\nInterrupted.", err=True)
        raise typer.Exit(130)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", dir_okay=False, help="Config YAML (default: ~/.config/repofleet/fleet.yml)"),
    root: Optional[Path] = typer.Option(None, "--root", envvar="REPOFLEET_ROOT", file_okay=False, help="Directory holding the cloned repos"),
    org: Optional[str] = typer.Option(None, "--org", envvar="REPOFLEET_ORG", help="GitHub organization or user"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and full git diagnostics"),
) -> None:
    """Load configuration shared by every subcommand."""
    configure_logging(verbose=verbose)
    try:
        config = load_config(config_path)
    except ConfigError as e:
        _err(str(e))
    ctx.obj = config.with_overrides(root=root, org=org)
    ctx.meta["verbose"] = verbose


@app.command("sync")
def sync_cmd(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="List repos without fetching or pulling"),
    parallel: bool = typer.Option(False, "--parallel", help="Sync repos concurrently"),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Worker count for --parallel (default: CPU count)"),
    json_out: bool = typer.Option(False, "-j", help="JSON output"),
) -> None:
    """Fetch and pull every repository under the fleet root."""
    config = _config(ctx)
    try:
        repos = sorted_repos(config.root)
    except DiscoveryError as e:
        _fatal(str(e))
    scheduler = make_scheduler(parallel, workers or config.workers)
    runner = _make_runner(config)
    outcomes = _run(scheduler, lambda: sync_fleet(repos, runner, scheduler, dry_run=dry_run))
    summary = aggregate(outcomes)
    if json_out:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return
    typer.echo(render_sync(summary, verbose=ctx.meta.get("verbose", False)))


@app.command("check")
def check_cmd(
    ctx: typer.Context,
    strict: bool = typer.Option(False, "--strict", help="List repos whose status query failed instead of treating them as clean"),
    parallel: bool = typer.Option(False, "--parallel", help="Query repos concurrently"),
    json_out: bool = typer.Option(False, "-j", help="JSON output"),
) -> None:
    """Report repositories with uncommitted or untracked changes."""
    config = _config(ctx)
    try:
        repos = sorted_repos(config.root)
    except DiscoveryError as e:
        _fatal(str(e))
    scheduler = make_scheduler(parallel, config.workers)
    runner = _make_runner(config)
    probes = _run(scheduler, lambda: probe_fleet(repos, runner, scheduler, config.drift_lines))
    summary = aggregate(r for r in (to_report(p) for p in probes) if r is not None)
    unknown = [p for p in probes if p.probe is Probe.INDETERMINATE] if strict else []
    if json_out:
        data = {
            "scanned": len(probes),
            "with_changes": summary.failed,
            "repos": [e.to_dict() for e in summary.entries],
        }
        if strict:
            data["unknown"] = [p.repository.name for p in unknown]
        typer.echo(json.dumps(data, indent=2))
        return
    typer.echo(render_drift(summary, scanned=len(probes), unknown=unknown))


@app.command("analyze")
def analyze_cmd(
    ctx: typer.Context,
    workflow: Optional[str] = typer.Option(None, "--workflow", "-w", help="Only categories whose name contains this (case-insensitive)"),
    parallel: bool = typer.Option(False, "--parallel", help="Query repos concurrently"),
    json_out: bool = typer.Option(False, "-j", help="JSON output"),
) -> None:
    """Count recent failed workflow runs per category across the organization."""
    config = _config(ctx)
    org = _require_org(config)
    scheduler = make_scheduler(parallel, config.workers)
    forge = ForgeClient(_make_runner(config))
    try:
        tally = _run(scheduler, lambda: analyze_failures(
            org,
            forge,
            scheduler,
            categories=config.categories,
            workflow_filter=workflow,
            run_window=config.run_window,
            page_size=config.page_size,
        ))
    except ListingFailure as e:
        _fatal(str(e))
    if json_out:
        typer.echo(json.dumps(tally.to_dict(), indent=2))
        return
    typer.echo(click.style("=== Analyzing GitHub Workflow Failures ===", bold=True))
    typer.echo()
    text = render_failures(tally)
    if text:
        typer.echo(text)


@app.command("pages")
def pages_cmd(
    ctx: typer.Context,
    parallel: bool = typer.Option(False, "--parallel", help="Query repos concurrently"),
    json_out: bool = typer.Option(False, "-j", help="JSON output"),
) -> None:
    """List repos that ship a Pages workflow but do not have Pages enabled."""
    config = _config(ctx)
    org = _require_org(config)
    scheduler = make_scheduler(parallel, config.workers)
    forge = ForgeClient(_make_runner(config))
    try:
        exposures = _run(scheduler, lambda: audit_pages(
            org,
            forge,
            scheduler,
            workflow_path=config.pages_workflow,
            page_size=config.page_size,
        ))
    except ListingFailure as e:
        _fatal(str(e))
    if json_out:
        typer.echo(json.dumps([e.to_dict() for e in exposures if e.flagged], indent=2))
        return
    typer.echo(render_pages(exposures))


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
