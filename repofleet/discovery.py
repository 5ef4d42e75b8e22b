"""Repository discovery — one level under the fleet root."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from .errors import DiscoveryError
from .models import Repository

VCS_MARKER = ".git"


def is_repo(p: Path) -> bool:
    """True if p directly holds git metadata (dir, or gitfile for worktrees)."""
    try:
        return p.is_dir() and (p / VCS_MARKER).exists()
    except OSError:
        return False


def discover_repos(root: str | Path) -> Iterator[Repository]:
    """
    Yield a Repository per immediate subdirectory of root containing .git.

    The root is listed before the first yield, so an unreadable root raises
    DiscoveryError from this call rather than midway through iteration.
    Order is whatever the filesystem returns.
    """
    base = Path(root).expanduser()
    try:
        entries = list(base.iterdir())
    except OSError as e:
        raise DiscoveryError(base, e) from e
    return (Repository.from_path(entry) for entry in entries if is_repo(entry))


def sorted_repos(root: str | Path) -> list[Repository]:
    """Discovered repositories sorted by name (stable CLI output)."""
    return sorted(discover_repos(root), key=lambda r: r.name)
