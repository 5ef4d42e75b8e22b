"""Workflow failure analyzer — failed CI runs per category across an org."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from .config import DEFAULT_CATEGORIES
from .errors import QueryFailure
from .forge import ForgeClient
from .logging import get_logger
from .models import FailureTally
from .scheduler import SequentialScheduler

logger = get_logger("workflows")


def filter_categories(categories: Iterable[str], substring: str | None = None) -> list[str]:
    """Keep categories whose name contains substring, case-insensitively."""
    cats = list(categories)
    if not substring:
        return cats
    needle = substring.lower()
    return [c for c in cats if needle in c.lower()]


def _count_runs(forge: ForgeClient, org: str, repo: str, window: int) -> Counter[str]:
    try:
        return Counter(forge.failed_runs(org, repo, window))
    except QueryFailure as e:
        # A single repo's history must not suppress the rest of the fleet.
        logger.warning("%s; counting as 0", e)
        return Counter()


def analyze_failures(
    org: str,
    forge: ForgeClient,
    scheduler: SequentialScheduler,
    categories: Sequence[str] = DEFAULT_CATEGORIES,
    workflow_filter: str | None = None,
    run_window: int = 10,
    page_size: int = 100,
) -> FailureTally:
    """
    Tally failed runs per (category, repo) for org.

    Listing failures propagate (ListingFailure). Each failed run is matched
    to at most one category, by exact workflow name, so per-repo totals
    never count a run twice.
    """
    repos = forge.list_repos(org, page_size)
    cats = filter_categories(categories, workflow_filter)
    tally = FailureTally(categories=cats, repositories=repos)
    if not cats:
        return tally
    counters = scheduler.map(lambda repo: _count_runs(forge, org, repo, run_window), repos)
    for repo, counter in zip(repos, counters):
        for cat in cats:
            tally.add(cat, repo, counter.get(cat, 0))
    return tally
