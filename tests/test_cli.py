"""Tests for the monorepo-split command line."""

import json
import tempfile
from pathlib import Path

import pytest
from click.testing import CliRunner
from git import Repo

from monorepo_splitter.cli.main import main, parse_repo_options
from monorepo_splitter.core.object_cache import CACHE_FILE_NAME


@pytest.fixture
def monorepo():
    with tempfile.TemporaryDirectory() as temp_dir:
        repo_path = Path(temp_dir) / "mono"
        repo = Repo.init(repo_path)
        with repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")
        (repo_path / "core").mkdir()
        (repo_path / "core" / "main.py").write_text("print('core')\n")
        (repo_path / "docs").mkdir()
        (repo_path / "docs" / "index.md").write_text("# Docs\n")
        repo.index.add(["core/main.py", "docs/index.md"])
        repo.index.commit("Initial commit")
        yield repo_path


def test_parse_repo_options():
    assert parse_repo_options(("core=https://x/core.git", "docs=/srv/docs")) == {
        "core": "https://x/core.git",
        "docs": "/srv/docs",
    }


def test_split_command(monorepo, tmp_path):
    runner = CliRunner()
    cache_dir = tmp_path / "cache"

    result = runner.invoke(
        main,
        [
            "split",
            "--monorepo",
            str(monorepo),
            "--repo",
            "core=/srv/core.git",
            "--repo",
            "docs=/srv/docs.git",
            "--cache-dir",
            str(cache_dir),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Done" in result.output
    assert "Created 2 branches" in result.output
    assert (cache_dir / CACHE_FILE_NAME).exists()
    heads = [head.name for head in Repo(cache_dir / "repo").heads]
    assert len(heads) == 2
    assert all(name.startswith(("core/", "docs/")) for name in heads)


def test_split_with_config_file(monorepo, tmp_path):
    config_path = tmp_path / "split.json"
    config_path.write_text(
        json.dumps(
            {
                "monorepo_url": str(monorepo),
                "repositories": {"core": "/srv/core.git", "docs": "/srv/docs.git"},
                "cache_dir": str(tmp_path / "cache"),
            }
        )
    )
    runner = CliRunner()

    result = runner.invoke(main, ["split", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert "Done" in result.output


def test_split_reports_orphan_commits(monorepo, tmp_path):
    """Test that a subfolder list missing a commit's folders is fatal."""
    runner = CliRunner()

    result = runner.invoke(
        main,
        [
            "split",
            "--monorepo",
            str(monorepo),
            "--repo",
            "other=/srv/other.git",
            "--cache-dir",
            str(tmp_path / "cache"),
        ],
    )

    assert result.exit_code == 1
    assert "No subfolder found" in result.output
    assert "core" in result.output
    assert not (tmp_path / "cache" / CACHE_FILE_NAME).exists()


def test_split_requires_monorepo(tmp_path):
    runner = CliRunner()

    result = runner.invoke(
        main, ["split", "--repo", "core=/srv/core.git", "--cache-dir", str(tmp_path)]
    )

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_split_rejects_malformed_repo_option(tmp_path):
    runner = CliRunner()

    result = runner.invoke(main, ["split", "--repo", "core", "--cache-dir", str(tmp_path)])

    assert result.exit_code == 2
    assert "SUBFOLDER=URL" in result.output


def test_clear_cache(tmp_path):
    (tmp_path / CACHE_FILE_NAME).write_text("{}")
    runner = CliRunner()

    result = runner.invoke(main, ["clear-cache", "--cache-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert not (tmp_path / CACHE_FILE_NAME).exists()
    assert "Removed" in result.output


def test_clear_missing_cache(tmp_path):
    runner = CliRunner()

    result = runner.invoke(main, ["clear-cache", "--cache-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "No cache found" in result.output
