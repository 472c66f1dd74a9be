"""Persistent cache of parsed commit and tree objects.

Objects are content addressed, so a cached value never goes stale and the
cache is never invalidated. It only saves backend reads across runs.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Dict

from pydantic import BaseModel, ValidationError

from monorepo_splitter.models import Commit, Tree

if TYPE_CHECKING:
    from monorepo_splitter.core.backend import Backend

logger = logging.getLogger(__name__)

CACHE_VERSION = 1
CACHE_FILE_NAME = f"objects-v{CACHE_VERSION}.json"


class CacheSnapshot(BaseModel):
    """On-disk form of the object cache."""

    version: int = CACHE_VERSION
    commits: Dict[str, Commit] = {}
    trees: Dict[str, Tree] = {}


class ObjectCache:
    """Read-through cache in front of the git object backend."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.commits: Dict[str, Commit] = {}
        self.trees: Dict[str, Tree] = {}
        self.hits = 0
        self.misses = 0

    @classmethod
    def in_directory(cls, cache_dir: Path) -> "ObjectCache":
        return cls(Path(cache_dir) / CACHE_FILE_NAME)

    def load(self) -> bool:
        """Load the cache artifact if one exists.

        Returns:
            True if cached objects were loaded, False otherwise
        """
        if not self.path.exists():
            return False

        try:
            snapshot = CacheSnapshot.model_validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable cache %s: %s", self.path, e)
            return False

        if snapshot.version != CACHE_VERSION:
            logger.warning(
                "Ignoring cache %s with version %s", self.path, snapshot.version
            )
            return False

        self.commits.update(snapshot.commits)
        self.trees.update(snapshot.trees)
        logger.debug(
            "Loaded %d commits and %d trees from %s",
            len(snapshot.commits),
            len(snapshot.trees),
            self.path,
        )
        return True

    def save(self) -> None:
        """Write the cache artifact, replacing any previous one."""
        snapshot = CacheSnapshot(commits=self.commits, trees=self.trees)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(snapshot.model_dump_json())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_commit(self, commit_hash: str, backend: "Backend") -> Commit:
        commit = self.commits.get(commit_hash)
        if commit is not None:
            self.hits += 1
            return commit

        self.misses += 1
        commit = backend.get_commit(commit_hash)
        self.commits[commit_hash] = commit
        return commit

    def get_tree(self, tree_hash: str, backend: "Backend") -> Tree:
        tree = self.trees.get(tree_hash)
        if tree is not None:
            self.hits += 1
            return tree

        self.misses += 1
        tree = backend.get_tree(tree_hash)
        self.trees[tree_hash] = tree
        return tree

    def add_commit(self, commit: Commit) -> None:
        """Store a commit that was just written to the backend."""
        if commit.hash is None:
            raise ValueError("Cannot cache a commit that has not been written")
        self.commits[commit.hash] = commit

    def __len__(self) -> int:
        return len(self.commits) + len(self.trees)
