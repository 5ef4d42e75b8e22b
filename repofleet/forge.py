"""Forge client — GitHub queries through the gh CLI."""

from __future__ import annotations

import json
import re
from typing import Any

from .errors import ListingFailure, QueryFailure
from .logging import get_logger
from .models import Probe
from .runner import CommandRunner

logger = get_logger("forge")

_NOT_FOUND = re.compile(r"HTTP 404|Not Found", re.IGNORECASE)


def _parse_json(text: str) -> Any:
    return json.loads(text) if text.strip() else []


class ForgeClient:
    """Organization listing, run history and existence probes."""

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def list_repos(self, org: str, limit: int = 100) -> list[str]:
        """Repository names for org, at most `limit`. Raises ListingFailure."""
        result = self.runner.run_forge(["repo", "list", org, "--limit", str(limit), "--json", "name"])
        if not result.ok:
            raise ListingFailure(org, result.output.strip())
        try:
            data = _parse_json(result.stdout)
            names = [item["name"] for item in data]
        except (ValueError, TypeError, KeyError) as e:
            raise ListingFailure(org, f"unexpected response: {e}") from e
        return [n for n in names if n][:limit]

    def failed_runs(self, org: str, repo: str, window: int = 10) -> list[str]:
        """Workflow names of the most recent failed runs. Raises QueryFailure."""
        result = self.runner.run_forge([
            "run", "list",
            "--repo", f"{org}/{repo}",
            "--status", "failure",
            "--limit", str(window),
            "--json", "name",
        ])
        if not result.ok:
            raise QueryFailure(f"{org}/{repo}: run list failed: {result.output.strip()}")
        try:
            data = _parse_json(result.stdout)
            return [str(run["name"]) for run in data][:window]
        except (ValueError, TypeError, KeyError) as e:
            raise QueryFailure(f"{org}/{repo}: unparseable run list: {e}") from e

    def _probe(self, endpoint: str) -> Probe:
        result = self.runner.run_forge(["api", endpoint, "--silent"])
        if result.ok:
            return Probe.PRESENT
        if not result.timed_out and _NOT_FOUND.search(result.output):
            return Probe.ABSENT
        logger.warning("Probe failed for %s: %s", endpoint, result.output.strip() or result.returncode)
        return Probe.INDETERMINATE

    def content_exists(self, org: str, repo: str, path: str) -> Probe:
        return self._probe(f"repos/{org}/{repo}/contents/{path.lstrip('/')}")

    def pages_enabled(self, org: str, repo: str) -> Probe:
        return self._probe(f"repos/{org}/{repo}/pages")
