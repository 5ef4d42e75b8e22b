"""Error taxonomy. Only DiscoveryError and ListingFailure are fatal."""

from __future__ import annotations

from pathlib import Path


class FleetError(RuntimeError):
    """Base class for repofleet errors."""


class ConfigError(FleetError):
    """Raised when the configuration file cannot be parsed."""


class DiscoveryError(FleetError):
    """The fleet root could not be listed."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read fleet root {path}: {cause}")


class SyncFailure(FleetError):
    """fetch or pull failed for one repository."""

    def __init__(self, repo: str, step: str, output: str) -> None:
        self.repo = repo
        self.step = step
        self.output = output
        super().__init__(f"{repo}: git {step} failed")


class QueryFailure(FleetError):
    """A status or forge query failed for one repository."""


class ListingFailure(FleetError):
    """The organization's repository list could not be retrieved."""

    def __init__(self, org: str, detail: str) -> None:
        self.org = org
        self.detail = detail
        msg = f"Cannot list repositories for {org}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
