"""Structured results for fleet sync, drift checks and forge audits."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

DEFAULT_REASON = "has local changes or conflicts"


class Probe(str, Enum):
    """Outcome of a fallible existence/status query."""

    PRESENT = "present"
    ABSENT = "absent"
    INDETERMINATE = "indeterminate"  # query failed, state unknown

    def collapse(self) -> "Probe":
        """Treat an unknown result as absent."""
        return Probe.ABSENT if self is Probe.INDETERMINATE else self


class SyncStatus(str, Enum):
    SYNCED = "synced"
    CONFLICTED = "conflicted"
    SKIPPED = "skipped"  # dry-run


@dataclass(frozen=True)
class Repository:
    """A local clone: a directory directly containing .git."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    @classmethod
    def from_path(cls, path: str | Path) -> "Repository":
        # absolute, not resolved: a symlinked entry keeps its own name
        return cls(path=Path(path).absolute())


@dataclass(frozen=True)
class SyncOutcome:
    """Result of fetch + pull for one repository."""

    repository: Repository
    status: SyncStatus
    diagnostic: str = ""

    @property
    def reason(self) -> str:
        for line in self.diagnostic.splitlines():
            if line.strip():
                return line.strip()
        return DEFAULT_REASON

    def to_dict(self) -> dict:
        return {
            "name": self.repository.name,
            "path": str(self.repository.path),
            "status": self.status.value,
            "diagnostic": self.diagnostic,
        }


@dataclass(frozen=True)
class DriftProbe:
    """Unclamped working-tree status for one repository."""

    repository: Repository
    probe: Probe
    lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class DriftReport:
    """Repository with uncommitted or untracked changes."""

    repository: Repository
    lines: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "name": self.repository.name,
            "path": str(self.repository.path),
            "changes": list(self.lines),
        }


@dataclass
class FailureTally:
    """Failed-run counts per (workflow category, repository name)."""

    categories: list[str]
    repositories: list[str]
    counts: dict[tuple[str, str], int] = field(default_factory=dict)

    def add(self, category: str, repo: str, count: int) -> None:
        if count < 0:
            raise ValueError(f"negative failure count for {repo}: {count}")
        self.counts[(category, repo)] = self.counts.get((category, repo), 0) + count

    def failures_for(self, category: str) -> list[tuple[str, int]]:
        """Repositories with a non-zero count, in listing order."""
        pairs = []
        for repo in self.repositories:
            n = self.counts.get((category, repo), 0)
            if n > 0:
                pairs.append((repo, n))
        return pairs

    def total_for(self, repo: str) -> int:
        return sum(self.counts.get((c, repo), 0) for c in self.categories)

    def to_dict(self) -> dict:
        return {c: dict(self.failures_for(c)) for c in self.categories}


@dataclass(frozen=True)
class PagesExposure:
    """Pages workflow declared vs. pages hosting actually enabled."""

    repository: str
    workflow: Probe
    pages: Probe = Probe.ABSENT

    @property
    def has_pages_workflow(self) -> bool:
        return self.workflow.collapse() is Probe.PRESENT

    @property
    def pages_enabled(self) -> bool:
        return self.pages.collapse() is Probe.PRESENT

    @property
    def flagged(self) -> bool:
        return self.has_pages_workflow and not self.pages_enabled

    def to_dict(self) -> dict:
        return {
            "repo": self.repository,
            "workflow": self.workflow.value,
            "pages": self.pages.value,
            "flagged": self.flagged,
        }
