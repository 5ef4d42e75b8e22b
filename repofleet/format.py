"""Terminal output formatting for fleet reports."""

from typing import List, Sequence

import click

from .aggregate import FleetSummary
from .models import DriftProbe, FailureTally, PagesExposure, Probe, SyncOutcome, SyncStatus

OK_MARK = "✓"
WARN_MARK = "⚠"


def _title(text: str) -> str:
    return click.style(f"=== {text} ===", bold=True)


def _indent(text: str, indent: int = 4) -> List[str]:
    prefix = " " * indent
    return [prefix + ln for ln in text.splitlines() if ln.strip()]


def _sync_line(outcome: SyncOutcome) -> str:
    name = outcome.repository.name
    if outcome.status is SyncStatus.SYNCED:
        return f"{name}: " + click.style(OK_MARK, fg="green")
    if outcome.status is SyncStatus.SKIPPED:
        return f"{name}: " + click.style("[dry-run]", dim=True)
    return f"{name}: " + click.style(f"{WARN_MARK} ({outcome.reason})", fg="yellow")


def render_sync(summary: FleetSummary, verbose: bool = False) -> str:
    """One line per repo, diagnostics indented under failures when verbose."""
    lines = [_title("Syncing Repositories"), "", f"Found {summary.total} repositories", ""]
    for outcome in summary.entries:
        lines.append(_sync_line(outcome))
        if verbose and outcome.status is SyncStatus.CONFLICTED:
            lines.extend(click.style(ln, dim=True) for ln in _indent(outcome.diagnostic))
    lines.append("")
    totals = f"Synced: {summary.synced}, Failed: {summary.failed}"
    if summary.skipped:
        totals += f", Skipped: {summary.skipped}"
    lines.append(totals)
    return "\n".join(lines)


def render_drift(summary: FleetSummary, scanned: int, unknown: Sequence[DriftProbe] = ()) -> str:
    """Block per drifting repo; unknown (failed query) repos only when passed in."""
    lines = [_title("Checking Repositories for Uncommitted Changes"), ""]
    for report in summary.entries:
        lines.append(_title(report.repository.name))
        lines.extend(report.lines)
        lines.append("")
    for probe in unknown:
        lines.append(f"{probe.repository.name}: " + click.style("? (status query failed)", fg="yellow"))
    if unknown:
        lines.append("")
    if summary.failed == 0:
        lines.append(click.style("All repositories are clean!", fg="green"))
    else:
        lines.append(f"{summary.failed} of {scanned} repositories have uncommitted changes")
    return "\n".join(lines)


def render_failures(tally: FailureTally) -> str:
    """Header per category (empty categories included), then repo: count."""
    lines: List[str] = []
    for category in tally.categories:
        lines.append(_title(f"{category.upper()} FAILURES"))
        for repo, count in tally.failures_for(category):
            lines.append(f"  {repo}: " + click.style(str(count), fg="red"))
        lines.append("")
    return "\n".join(lines)


def render_pages(exposures: Sequence[PagesExposure]) -> str:
    lines = [
        _title("Checking GitHub Pages Status"),
        "",
        "Repos with Pages workflow but Pages NOT enabled:",
        "",
    ]
    flagged = [e for e in exposures if e.flagged]
    for e in flagged:
        line = f"  {e.repository} - has workflow but Pages NOT enabled"
        if e.pages is Probe.INDETERMINATE:
            line += click.style(" (pages state unknown)", dim=True)
        lines.append(line)
    return "\n".join(lines)
