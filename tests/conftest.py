"""Shared fixtures for the splitter tests."""

import pytest
from fakes import FakeBackend

from monorepo_splitter.core.object_cache import ObjectCache


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def cache(tmp_path):
    return ObjectCache.in_directory(tmp_path / "cache")
