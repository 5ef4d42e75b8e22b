"""Shared fixtures: in-memory command runner and throwaway fleets."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from repofleet import config as config_module
from repofleet.runner import CommandResult

NOT_FOUND = CommandResult(1, stderr="gh: Not Found (HTTP 404)")


class FakeRunner:
    """Replays canned results; records every call."""

    def __init__(self) -> None:
        self.vcs: dict[tuple[str, tuple[str, ...]], CommandResult] = {}
        self.forge: list[tuple[str, CommandResult]] = []
        self.calls: list[tuple[str, str]] = []

    def on_vcs(
        self, repo: str, args: Sequence[str], returncode: int = 0, output: str = "", stderr: str = ""
    ) -> "FakeRunner":
        self.vcs[(repo, tuple(args))] = CommandResult(returncode, output, stderr)
        return self

    def on_forge(
        self, match: str, returncode: int = 0, output: str = "", stderr: str = "", timed_out: bool = False
    ) -> "FakeRunner":
        """First registered substring of the joined argv wins."""
        self.forge.append((match, CommandResult(returncode, output, stderr, timed_out=timed_out)))
        return self

    def run_vcs(self, repo: Path, args: Sequence[str]) -> CommandResult:
        self.calls.append((repo.name, " ".join(args)))
        return self.vcs.get((repo.name, tuple(args)), CommandResult(0, ""))

    def run_forge(self, args: Sequence[str]) -> CommandResult:
        line = " ".join(args)
        self.calls.append(("gh", line))
        for match, result in self.forge:
            if match in line:
                return result
        return NOT_FOUND


def make_repo(base: Path, name: str) -> Path:
    """Directory that looks like a clone (has .git)."""
    p = base / name
    (p / ".git").mkdir(parents=True)
    return p


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fleet_root(tmp_path: Path) -> Path:
    """{a, b} are clones, c is a plain directory, notes.txt is a file."""
    root = tmp_path / "repos"
    root.mkdir()
    make_repo(root, "a")
    make_repo(root, "b")
    (root / "c").mkdir()
    (root / "notes.txt").write_text("not a repo")
    return root


@pytest.fixture(autouse=True)
def _no_user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Never read the developer's real ~/.config/repofleet/fleet.yml."""
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "missing" / "fleet.yml")
    monkeypatch.delenv("REPOFLEET_ROOT", raising=False)
    monkeypatch.delenv("REPOFLEET_ORG", raising=False)


@pytest.fixture
def new_repo():
    """make_repo as a fixture, for tests that build their own fleets."""
    return make_repo
