"""External command capability — git for local clones, gh for the forge."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from .logging import get_logger

logger = get_logger("runner")

TIMEOUT_EXIT = 124  # same code coreutils `timeout` uses
NOT_FOUND_EXIT = 127


@dataclass(frozen=True)
class CommandResult:
    """Exit status plus the separate stdout/stderr of one command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def output(self) -> str:
        """Both streams, for diagnostics only; parse stdout."""
        return "\n".join(s.rstrip("\n") for s in (self.stdout, self.stderr) if s)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    def run_vcs(self, repo: Path, args: Sequence[str]) -> CommandResult: ...

    def run_forge(self, args: Sequence[str]) -> CommandResult: ...


# Locale-independent, never prompt for credentials.
_QUIET_ENV = {
    "LC_ALL": "C",
    "GIT_TERMINAL_PROMPT": "0",
    "GH_PROMPT_DISABLED": "1",
    "GH_NO_UPDATE_NOTIFIER": "1",
}


class SubprocessRunner:
    """Runs git/gh via subprocess; failures come back as results, not exceptions."""

    def __init__(self, vcs: str = "git", forge: str = "gh", timeout: float | None = 120.0) -> None:
        self.vcs = vcs
        self.forge = forge
        self.timeout = timeout
        self._env = {**os.environ, **_QUIET_ENV}

    def run_vcs(self, repo: Path, args: Sequence[str]) -> CommandResult:
        return self._run([self.vcs, *args], cwd=repo)

    def run_forge(self, args: Sequence[str]) -> CommandResult:
        return self._run([self.forge, *args])

    def _run(self, cmd: list[str], cwd: Path | None = None) -> CommandResult:
        logger.debug("$ %s%s", " ".join(cmd), f"  (in {cwd})" if cwd else "")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                env=self._env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Timed out after %ss: %s", self.timeout, " ".join(cmd))
            return CommandResult(TIMEOUT_EXIT, stderr=f"timed out after {self.timeout}s", timed_out=True)
        except FileNotFoundError:
            return CommandResult(NOT_FOUND_EXIT, stderr=f"{cmd[0]}: command not found")
        except OSError as e:  # e.g. cwd vanished or not permitted
            return CommandResult(1, stderr=str(e))
        return CommandResult(result.returncode, result.stdout or "", result.stderr or "")
