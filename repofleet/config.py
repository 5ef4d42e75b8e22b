"""Fleet configuration: YAML file + CLI overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .logging import get_logger

logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "repofleet" / "fleet.yml"
DEFAULT_ROOT = Path.home() / "repos"

DEFAULT_CATEGORIES = (
    "Workflow Security Linter",
    "Code Quality",
    "CodeQL Security Analysis",
    "OpenSSF Scorecard Enforcer",
    "Mirror to Git Forges",
    "GitHub Pages",
)
DEFAULT_PAGES_WORKFLOW = ".github/workflows/jekyll-gh-pages.yml"


@dataclass
class FleetConfig:
    """Settings shared by every fleet command."""

    root: Path = DEFAULT_ROOT
    org: str | None = None
    run_window: int = 10  # most recent failed runs inspected per repo
    page_size: int = 100  # repos beyond this are not visited
    workers: int = field(default_factory=lambda: os.cpu_count() or 1)
    timeout: float = 120.0  # seconds per external command
    categories: tuple[str, ...] = DEFAULT_CATEGORIES
    pages_workflow: str = DEFAULT_PAGES_WORKFLOW
    drift_lines: int = 8

    def with_overrides(self, **overrides: Any) -> "FleetConfig":
        """Copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if "root" in values:
            values["root"] = Path(values["root"]).expanduser()
        return replace(self, **values)


_INT_KEYS = ("run_window", "page_size", "workers", "drift_lines")


def load_config(config_path: Path | None = None) -> FleetConfig:
    """Load configuration from disk; a missing file means defaults."""
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        if config_path:
            raise ConfigError(f"Config file not found: {path}")
        return FleetConfig()
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")
    return _from_dict(data, path)


def _from_dict(data: dict[str, Any], source: Path) -> FleetConfig:
    config = FleetConfig()
    known = set(FleetConfig.__dataclass_fields__)
    for key in data:
        if key not in known:
            logger.debug("Ignoring unknown config key %r in %s", key, source)

    values: dict[str, Any] = {}
    if data.get("root") is not None:
        values["root"] = Path(str(data["root"])).expanduser()
    if data.get("org") is not None:
        values["org"] = str(data["org"])
    for key in _INT_KEYS:
        if data.get(key) is None:
            continue
        value = data[key]
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"{source}: {key} must be a positive integer, got {value!r}")
        values[key] = value
    if data.get("timeout") is not None:
        timeout = data["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"{source}: timeout must be a positive number, got {timeout!r}")
        values["timeout"] = float(timeout)
    if data.get("categories") is not None:
        cats = data["categories"]
        if not isinstance(cats, list) or not all(isinstance(c, str) and c for c in cats):
            raise ConfigError(f"{source}: categories must be a list of workflow names")
        values["categories"] = tuple(cats)
    if data.get("pages_workflow") is not None:
        values["pages_workflow"] = str(data["pages_workflow"])
    return replace(config, **values)
