"""Split a monorepo history into one history per subfolder."""

import logging
import shutil
from typing import Dict, Optional

from pydantic import BaseModel
from rich.console import Console

from monorepo_splitter.core.backend import Backend, GitBackend
from monorepo_splitter.core.commit_factory import SubtreeCommitFactory
from monorepo_splitter.core.config import SplitConfig
from monorepo_splitter.core.errors import DataIntegrityError
from monorepo_splitter.core.graph_reader import read_commits
from monorepo_splitter.core.hash_mapping import HashMapping
from monorepo_splitter.core.object_cache import ObjectCache
from monorepo_splitter.core.scheduler import SplitScheduler

logger = logging.getLogger(__name__)

MONOREPO_REMOTE = "mono"
PROGRESS_EVERY = 1000


class SplitResult(BaseModel):
    """Outcome of a successful split run."""

    mapping: HashMapping
    branches: Dict[str, str] = {}  # name -> commit hash
    objects_written: int = 0
    commits_read: int = 0

    model_config = {"arbitrary_types_allowed": True}


class Splitter:
    """Runs a complete split of the configured monorepo.

    The run fetches the monorepo into a scratch repository under the cache
    directory, rewrites the history of every subfolder and creates a
    ``<subfolder>/<branch>`` branch for each original branch.
    """

    def __init__(
        self,
        config: SplitConfig,
        backend: Optional[Backend] = None,
        console: Optional[Console] = None,
        push: bool = False,
    ):
        self.config = config
        self.config.ensure_cache_dir()
        self.backend = backend if backend is not None else GitBackend(config.repo_dir)
        self.console = console or Console()
        self.push = push
        self.cache = ObjectCache.in_directory(config.cache_dir)

    def split(self) -> SplitResult:
        if self.cache.path.exists():
            self.console.print("\nLoad data from cache...")
            self.cache.load()

        self.console.print("\nLoad monorepo...")
        self._reset_repository()
        self.backend.initialize()
        self.backend.add_remote(MONOREPO_REMOTE, self.config.monorepo_url)
        self.backend.fetch(MONOREPO_REMOTE)
        self.backend.fetch_tags(MONOREPO_REMOTE, f"remote/{MONOREPO_REMOTE}/")

        branch_commits = self.backend.get_remote_branches(MONOREPO_REMOTE)

        self.console.print("\nRead commits...")
        commits = read_commits(branch_commits.values(), self.cache, self.backend)
        if not commits:
            raise DataIntegrityError(
                f"No commits found for: {branch_commits}", branch_commits
            )

        self.console.print(f"\nSplit {len(commits)} commits...")
        factory = SubtreeCommitFactory(
            self.config.repositories, self.cache, self.backend
        )
        scheduler = SplitScheduler(commits, factory, progress=self._report_progress)
        mapping = scheduler.run()
        if mapping.is_empty():
            raise DataIntegrityError("No hash mapping for commits", commits)

        self.console.print("\nCreate branches...")
        branches = self._create_branches(branch_commits, mapping)

        if self.push:
            self.console.print("\nPush branches...")
            self._push_branches(branch_commits, mapping)

        self.console.print("\nUpdate cache...")
        self.cache.save()

        self.console.print("\nDone 🎉")
        return SplitResult(
            mapping=mapping,
            branches=branches,
            objects_written=factory.objects_written,
            commits_read=len(commits),
        )

    def _reset_repository(self) -> None:
        repo_dir = self.config.repo_dir
        if repo_dir.exists():
            shutil.rmtree(repo_dir)
        repo_dir.mkdir(parents=True)

    def _create_branches(
        self, branch_commits: Dict[str, str], mapping: HashMapping
    ) -> Dict[str, str]:
        branches = {}
        for branch, commit in branch_commits.items():
            for subfolder in self.config.repositories:
                new_hash = mapping.get(subfolder, commit)
                if new_hash is None:
                    continue
                name = f"{subfolder}/{branch}"
                self.backend.add_branch(name, new_hash)
                branches[name] = new_hash
                logger.debug("Branch %s -> %s", name, new_hash)
        return branches

    def _push_branches(self, branch_commits: Dict[str, str], mapping: HashMapping) -> None:
        for subfolder, remote_url in self.config.repositories.items():
            refspecs = [
                f"+refs/heads/{subfolder}/{branch}:refs/heads/{branch}"
                for branch, commit in branch_commits.items()
                if mapping.get(subfolder, commit) is not None
            ]
            if refspecs:
                self.console.print(f"  {subfolder} -> {remote_url}")
                self.backend.push(remote_url, refspecs)

    def _report_progress(self, done: int, total: int) -> None:
        if done % PROGRESS_EVERY == 0:
            self.console.print(f"  {done}/{total} commits")
