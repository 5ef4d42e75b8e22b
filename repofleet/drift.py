"""Drift detector — uncommitted or untracked changes per working tree."""

from __future__ import annotations

from typing import Iterable

from .logging import get_logger
from .models import DriftProbe, DriftReport, Probe, Repository
from .runner import CommandRunner
from .scheduler import SequentialScheduler

logger = get_logger("drift")

STATUS_ARGS = ("status", "--porcelain")
DEFAULT_LIMIT = 8


def probe_drift(repo: Repository, runner: CommandRunner, limit: int = DEFAULT_LIMIT) -> DriftProbe:
    """Query working-tree status. Read-only."""
    result = runner.run_vcs(repo.path, STATUS_ARGS)
    if not result.ok:
        logger.warning("%s: git status failed: %s", repo.name, result.output.strip() or result.returncode)
        return DriftProbe(repo, Probe.INDETERMINATE)
    if result.stderr.strip():
        logger.debug("%s: git status stderr: %s", repo.name, result.stderr.strip())
    # stderr carries warnings, not changed paths
    if not result.stdout.strip():
        return DriftProbe(repo, Probe.ABSENT)
    lines = [ln for ln in result.stdout.splitlines() if ln.strip()]
    return DriftProbe(repo, Probe.PRESENT, tuple(lines[:limit]))


def to_report(probe: DriftProbe) -> DriftReport | None:
    """Collapse a probe: a failed status query counts as no drift."""
    if probe.probe.collapse() is not Probe.PRESENT:
        return None
    return DriftReport(probe.repository, probe.lines)


def detect_drift(repo: Repository, runner: CommandRunner, limit: int = DEFAULT_LIMIT) -> DriftReport | None:
    return to_report(probe_drift(repo, runner, limit))


def probe_fleet(
    repos: Iterable[Repository],
    runner: CommandRunner,
    scheduler: SequentialScheduler,
    limit: int = DEFAULT_LIMIT,
) -> list[DriftProbe]:
    return scheduler.map(lambda repo: probe_drift(repo, runner, limit), repos)
