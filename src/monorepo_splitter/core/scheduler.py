"""Schedule the split of every commit after its parents."""

import logging
from collections import Counter
from typing import Callable, Dict, List, Optional

from monorepo_splitter.core.commit_factory import SubtreeCommitFactory
from monorepo_splitter.core.errors import DataIntegrityError
from monorepo_splitter.core.hash_mapping import HashMapping
from monorepo_splitter.models import Commit

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class SplitScheduler:
    """Drives the factory over a commit graph, parents first.

    Each subfolder exists in a different part of the history, so there is no
    single useful topological order. Instead a LIFO worklist is iterated to a
    fixed point: a commit whose parents are not mapped yet is pushed back
    together with those parents, and retried once they are done.
    """

    def __init__(
        self,
        commits: Dict[str, Commit],
        factory: SubtreeCommitFactory,
        mapping: Optional[HashMapping] = None,
        progress: Optional[ProgressCallback] = None,
    ):
        self.commits = commits
        self.factory = factory
        self.mapping = mapping if mapping is not None else HashMapping()
        self.progress = progress
        self.push_counts: Counter = Counter()
        self.processed: List[str] = []

    def run(self) -> HashMapping:
        pending = list(self.commits)

        while pending:
            current = pending.pop()
            if self.mapping.has_any(current):
                continue

            missing = self._missing_parents(current)
            if missing:
                self.push_counts[current] += 1
                pending.append(current)
                pending.extend(missing)
                continue

            commit = self.commits[current]
            results = self.factory.split_commit(current, commit.tree_hash, self.mapping)
            self.mapping.commit(current, results)
            self.processed.append(current)

            if self.progress is not None:
                self.progress(len(self.processed), len(self.commits))

        logger.debug(
            "Split %d commits, %d retries", len(self.processed), sum(self.push_counts.values())
        )
        return self.mapping

    def _missing_parents(self, commit_hash: str) -> List[str]:
        missing = []
        for parent in self.commits[commit_hash].parent_hashes:
            if self.mapping.has_any(parent):
                continue
            if parent not in self.commits:
                raise DataIntegrityError(
                    f"Parent {parent} of {commit_hash} was not read", commit_hash
                )
            missing.append(parent)
        return missing
