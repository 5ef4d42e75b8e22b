"""Sync executor — git fetch --all, then git pull, per repository."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable

from .errors import SyncFailure
from .logging import get_logger
from .models import Repository, SyncOutcome, SyncStatus
from .runner import CommandRunner
from .scheduler import SequentialScheduler

logger = get_logger("sync")

FETCH_ARGS = ("fetch", "--all", "-q")
PULL_ARGS = ("pull", "-q")


def _tree_key(repo: Repository) -> Path:
    """Working-tree identity: symlinked entries share their target's key."""
    return repo.path.resolve()


def _run_step(repo: Repository, runner: CommandRunner, step: str, args: tuple[str, ...]) -> str:
    result = runner.run_vcs(repo.path, args)
    if not result.ok:
        raise SyncFailure(repo.name, step, result.output.strip())
    return result.output.strip()


def sync_repo(
    repo: Repository,
    runner: CommandRunner,
    dry_run: bool = False,
    lock: threading.Lock | None = None,
) -> SyncOutcome:
    """
    Fetch all remotes, then integrate the current branch with its upstream.

    Network errors, merge conflicts and missing upstreams all come back as
    CONFLICTED with git's own output; nothing is raised. Pass the same
    lock for entries sharing a working tree to keep their syncs apart.
    """
    if dry_run:
        return SyncOutcome(repo, SyncStatus.SKIPPED)
    output: list[str] = []
    with lock or threading.Lock():
        try:
            output.append(_run_step(repo, runner, "fetch", FETCH_ARGS))
            output.append(_run_step(repo, runner, "pull", PULL_ARGS))
        except SyncFailure as e:
            logger.info("%s", e)
            output.append(e.output)
            diagnostic = "\n".join(part for part in output if part)
            return SyncOutcome(repo, SyncStatus.CONFLICTED, diagnostic)
    return SyncOutcome(repo, SyncStatus.SYNCED, "\n".join(part for part in output if part))


def sync_fleet(
    repos: Iterable[Repository],
    runner: CommandRunner,
    scheduler: SequentialScheduler,
    dry_run: bool = False,
) -> list[SyncOutcome]:
    """Sync every repository; outcomes follow the input order."""
    repos = list(repos)
    # Lock table lives for this call only; one lock per resolved working tree.
    locks: dict[Path, threading.Lock] = {}
    for repo in repos:
        locks.setdefault(_tree_key(repo), threading.Lock())
    return scheduler.map(
        lambda repo: sync_repo(repo, runner, dry_run=dry_run, lock=locks[_tree_key(repo)]),
        repos,
    )
