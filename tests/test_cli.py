"""CLI behaviour tests — fake runner, real temp fleets."""

import json
from unittest.mock import patch

import click
import pytest
from typer.testing import CliRunner

from repofleet.cli import app
from repofleet.drift import STATUS_ARGS
from repofleet.sync import PULL_ARGS

cli = CliRunner()


@pytest.fixture
def invoke(fake_runner):
    def _invoke(*args):
        with patch("repofleet.cli._make_runner", return_value=fake_runner):
            result = cli.invoke(app, list(args))
        return result, click.unstyle(result.stdout)
    return _invoke


def test_check_scenario(fleet_root, fake_runner, invoke):
    """a clean, b with 2 untracked files, c a plain directory."""
    fake_runner.on_vcs("b", STATUS_ARGS, 0, "?? one.txt\n?? two.txt\n")
    result, out = invoke("--root", str(fleet_root), "check")
    assert result.exit_code == 0
    assert out.count("=== b ===") == 1
    assert "=== a ===" not in out
    assert "c" not in [ln.strip(" =") for ln in out.splitlines()]
    assert "1 of 2 repositories have uncommitted changes" in out


def test_check_all_clean(fleet_root, invoke):
    result, out = invoke("--root", str(fleet_root), "check")
    assert result.exit_code == 0
    assert "All repositories are clean!" in out


def test_check_strict_lists_unknown(fleet_root, fake_runner, invoke):
    fake_runner.on_vcs("a", STATUS_ARGS, 128, "fatal: not a git repository")
    _, out = invoke("--root", str(fleet_root), "check", "--strict")
    assert "a: ? (status query failed)" in out


def test_check_json(fleet_root, fake_runner, invoke):
    fake_runner.on_vcs("b", STATUS_ARGS, 0, " M x.py\n")
    _, out = invoke("--root", str(fleet_root), "check", "-j")
    data = json.loads(out)
    assert data["scanned"] == 2
    assert [r["name"] for r in data["repos"]] == ["b"]


def test_sync_reports_and_exits_zero(fleet_root, fake_runner, invoke):
    fake_runner.on_vcs("b", PULL_ARGS, 1, "There is no tracking information for the current branch.")
    result, out = invoke("--root", str(fleet_root), "sync")
    assert result.exit_code == 0
    assert "a: ✓" in out
    assert "b: ⚠ (There is no tracking information for the current branch.)" in out
    assert out.rstrip().splitlines()[-1] == "Synced: 1, Failed: 1"


def test_sync_parallel_same_report(fleet_root, fake_runner, invoke):
    _, sequential = invoke("--root", str(fleet_root), "sync")
    _, parallel = invoke("--root", str(fleet_root), "sync", "--parallel", "--workers", "4")
    assert sequential == parallel


def test_sync_dry_run(fleet_root, fake_runner, invoke):
    result, out = invoke("--root", str(fleet_root), "sync", "--dry-run")
    assert result.exit_code == 0
    assert "a: [dry-run]" in out
    assert fake_runner.calls == []


def test_missing_root_is_fatal(tmp_path, invoke):
    result, _ = invoke("--root", str(tmp_path / "gone"), "sync")
    assert result.exit_code == 1


def test_analyze_scenario(fake_runner, invoke, tmp_path):
    cfg = tmp_path / "fleet.yml"
    cfg.write_text("org: acme\ncategories: [CodeQL, Code Quality]\n")
    fake_runner.on_forge("repo list acme", 0, json.dumps([{"name": "x"}, {"name": "y"}]))
    fake_runner.on_forge("--repo acme/x", 0, json.dumps([{"name": "CodeQL"}] * 3))
    fake_runner.on_forge("--repo acme/y", 0, "[]")
    result, out = invoke("--config", str(cfg), "analyze", "--workflow=codeql")
    assert result.exit_code == 0
    lines = out.splitlines()
    i = lines.index("=== CODEQL FAILURES ===")
    assert lines[i + 1] == "  x: 3"
    assert "CODE QUALITY FAILURES" not in out


def test_analyze_filter_without_match(fake_runner, invoke):
    fake_runner.on_forge("repo list acme", 0, json.dumps([{"name": "x"}]))
    result, out = invoke("--org", "acme", "analyze", "--workflow", "zzz")
    assert result.exit_code == 0
    assert "FAILURES ===" not in out


def test_analyze_listing_failure(fake_runner, invoke):
    fake_runner.on_forge("repo list acme", 1, "HTTP 401: Bad credentials")
    result, _ = invoke("--org", "acme", "analyze")
    assert result.exit_code == 1


def test_analyze_requires_org(invoke):
    result, _ = invoke("analyze")
    assert result.exit_code == 2


def test_pages(fake_runner, invoke):
    fake_runner.on_forge("repo list acme", 0, json.dumps([{"name": "site"}, {"name": "lib"}]))
    fake_runner.on_forge("repos/acme/site/contents/", 0)
    result, out = invoke("--org", "acme", "pages")
    assert result.exit_code == 0
    assert "  site - has workflow but Pages NOT enabled" in out
    assert "lib -" not in out


def test_pages_json(fake_runner, invoke):
    fake_runner.on_forge("repo list acme", 0, json.dumps([{"name": "site"}]))
    fake_runner.on_forge("repos/acme/site/contents/", 0)
    _, out = invoke("--org", "acme", "pages", "-j")
    assert json.loads(out) == [{"repo": "site", "workflow": "present", "pages": "absent", "flagged": True}]


@pytest.fixture
def aliased_root(tmp_path, new_repo):
    """real is a clone; alias is a symlink to it."""
    root = tmp_path / "repos"
    root.mkdir()
    real = new_repo(root, "real")
    (root / "alias").symlink_to(real, target_is_directory=True)
    return root


def test_sync_symlinked_clone_counts_each_entry(aliased_root, invoke):
    result, out = invoke("--root", str(aliased_root), "sync", "--parallel", "--workers", "2")
    assert result.exit_code == 0
    assert "alias: ✓" in out
    assert "real: ✓" in out
    assert "Found 2 repositories" in out
    assert out.rstrip().splitlines()[-1] == "Synced: 2, Failed: 0"


def test_check_symlinked_clone_reports_both_entries(aliased_root, fake_runner, invoke):
    fake_runner.on_vcs("alias", STATUS_ARGS, 0, " M x.py\n")
    fake_runner.on_vcs("real", STATUS_ARGS, 0, " M x.py\n")
    result, out = invoke("--root", str(aliased_root), "check")
    assert result.exit_code == 0
    assert "=== alias ===" in out
    assert "=== real ===" in out
    assert "2 of 2 repositories have uncommitted changes" in out
