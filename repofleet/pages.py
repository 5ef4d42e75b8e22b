"""Pages-exposure auditor — pages workflow present but hosting disabled."""

from __future__ import annotations

from typing import Iterable

from .config import DEFAULT_PAGES_WORKFLOW
from .forge import ForgeClient
from .models import PagesExposure, Probe
from .scheduler import SequentialScheduler


def check_repo(forge: ForgeClient, org: str, repo: str, workflow_path: str = DEFAULT_PAGES_WORKFLOW) -> PagesExposure:
    """Probe the workflow file; only if it exists, probe the pages feature."""
    workflow = forge.content_exists(org, repo, workflow_path)
    if workflow is not Probe.PRESENT:
        return PagesExposure(repo, workflow)
    return PagesExposure(repo, workflow, forge.pages_enabled(org, repo))


def audit_pages(
    org: str,
    forge: ForgeClient,
    scheduler: SequentialScheduler,
    repos: Iterable[str] | None = None,
    workflow_path: str = DEFAULT_PAGES_WORKFLOW,
    page_size: int = 100,
) -> list[PagesExposure]:
    """All probe results in listing order; filter on .flagged for the report."""
    names = list(repos) if repos is not None else forge.list_repos(org, page_size)
    return scheduler.map(lambda repo: check_repo(forge, org, repo, workflow_path), names)
