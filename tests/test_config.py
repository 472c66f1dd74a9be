"""Tests for SplitConfig."""

import json
from pathlib import Path

import pytest

from monorepo_splitter.core.config import SplitConfig
from monorepo_splitter.core.errors import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "split.json"
    path.write_text(
        json.dumps(
            {
                "monorepo_url": "https://example.com/mono.git",
                "repositories": {"core-bundle": "https://example.com/core.git"},
                "cache_dir": str(tmp_path / "cache"),
            }
        )
    )
    return path


def test_load_from_file(config_file, tmp_path):
    config = SplitConfig.from_file(config_file)

    assert config.monorepo_url == "https://example.com/mono.git"
    assert config.repositories == {"core-bundle": "https://example.com/core.git"}
    assert config.cache_dir == tmp_path / "cache"
    assert config.repo_dir == tmp_path / "cache" / "repo"


def test_options_override_file(config_file, tmp_path):
    config = SplitConfig.from_file(
        config_file,
        monorepo_url="https://example.com/other.git",
        repositories={},
        cache_dir=None,
    )

    assert config.monorepo_url == "https://example.com/other.git"
    # Empty overrides keep the file values
    assert config.repositories == {"core-bundle": "https://example.com/core.git"}
    assert config.cache_dir == tmp_path / "cache"


def test_missing_file():
    with pytest.raises(ConfigurationError, match="Unable to read config"):
        SplitConfig.from_file(Path("/nonexistent/split.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "split.json"
    path.write_text("{")

    with pytest.raises(ConfigurationError, match="Unable to read config"):
        SplitConfig.from_file(path)


def test_subfolder_slashes_are_trimmed(tmp_path):
    config = SplitConfig.build(
        monorepo_url="u", repositories={"pkgA/": "a"}, cache_dir=tmp_path
    )

    assert list(config.repositories) == ["pkgA"]


@pytest.mark.parametrize("repositories", [{}, {"src/pkgA": "a"}, {"/": "a"}])
def test_invalid_subfolders(tmp_path, repositories):
    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        SplitConfig.build(monorepo_url="u", repositories=repositories, cache_dir=tmp_path)


def test_missing_monorepo_url(tmp_path):
    with pytest.raises(ConfigurationError, match="monorepo_url"):
        SplitConfig.build(monorepo_url=None, repositories={"a": "b"}, cache_dir=tmp_path)


def test_ensure_cache_dir_creates_directory(tmp_path):
    config = SplitConfig.build(
        monorepo_url="u", repositories={"a": "b"}, cache_dir=tmp_path / "x" / "y"
    )

    config.ensure_cache_dir()

    assert (tmp_path / "x" / "y").is_dir()


def test_config_file_must_hold_an_object(tmp_path):
    path = tmp_path / "split.json"
    path.write_text("[]")

    with pytest.raises(ConfigurationError, match="must hold a JSON object"):
        SplitConfig.from_file(path)
