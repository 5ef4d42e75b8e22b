"""repofleet — keep a fleet of local clones in sync and audit their CI."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("repofleet")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"
