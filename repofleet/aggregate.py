"""Fleet report aggregation — counts plus ordered per-repository entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

from .models import DriftReport, SyncOutcome, SyncStatus

Entry = Union[SyncOutcome, DriftReport]


@dataclass
class FleetSummary:
    """
    Aggregate over one run.

    Entries keep first-seen order. A repository may be counted once;
    adding it again raises ValueError. merge() is associative, so partial
    summaries built per worker combine into the same result.
    """

    synced: int = 0
    failed: int = 0
    skipped: int = 0
    entries: list[Entry] = field(default_factory=list)
    _seen: set[Path] = field(default_factory=set, repr=False)

    def add(self, entry: Entry) -> None:
        path = entry.repository.path
        if path in self._seen:
            raise ValueError(f"{entry.repository.name} already counted")
        self._seen.add(path)
        self.entries.append(entry)
        if isinstance(entry, SyncOutcome):
            if entry.status is SyncStatus.SYNCED:
                self.synced += 1
            elif entry.status is SyncStatus.CONFLICTED:
                self.failed += 1
            else:
                self.skipped += 1
        else:
            # drift: a report means the repo has changes
            self.failed += 1

    def merge(self, other: "FleetSummary") -> "FleetSummary":
        out = FleetSummary()
        for entry in [*self.entries, *other.entries]:
            out.add(entry)
        return out

    @property
    def total(self) -> int:
        return self.synced + self.failed + self.skipped

    def to_dict(self) -> dict:
        return {
            "synced": self.synced,
            "failed": self.failed,
            "skipped": self.skipped,
            "repos": [e.to_dict() for e in self.entries],
        }


def aggregate(entries: Iterable[Entry]) -> FleetSummary:
    summary = FleetSummary()
    for entry in entries:
        summary.add(entry)
    return summary
