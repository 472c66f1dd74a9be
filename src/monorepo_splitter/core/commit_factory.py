"""Create the rewritten commits of one original commit."""

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping

from monorepo_splitter.core.errors import DataIntegrityError
from monorepo_splitter.core.hash_mapping import HashMapping
from monorepo_splitter.core.object_cache import ObjectCache

if TYPE_CHECKING:
    from monorepo_splitter.core.backend import Backend

logger = logging.getLogger(__name__)


class SubtreeCommitFactory:
    """Builds one scoped commit per subfolder present in a commit's tree."""

    def __init__(
        self, subfolders: Iterable[str], cache: ObjectCache, backend: "Backend"
    ):
        self.subfolders = list(subfolders)
        self.cache = cache
        self.backend = backend
        self.objects_written = 0
        self.collapsed = 0

    def split_commit(
        self, commit_hash: str, tree_hash: str, mapping: HashMapping
    ) -> Dict[str, str]:
        """Compute the rewritten hash of a commit for every subfolder it has.

        The mapping is only read. The caller records the returned results in
        one step.

        Raises:
            DataIntegrityError: if the tree contains none of the subfolders
        """
        tree = self.cache.get_tree(tree_hash, self.backend)
        results = {}

        for subfolder in self.subfolders:
            subtree_hash = tree.get_subtree_hash(subfolder)
            if subtree_hash is None:
                continue
            results[subfolder] = self._create_commit(
                commit_hash, subtree_hash, mapping.subfolder(subfolder)
            )

        if not results:
            raise DataIntegrityError(f"No subfolder found in {commit_hash}", tree)

        return results

    def _create_commit(
        self, commit_hash: str, subtree_hash: str, mapping: Mapping[str, str]
    ) -> str:
        commit = self.cache.get_commit(commit_hash, self.backend)
        parents = remap_parents(commit.parent_hashes, mapping)
        derived = commit.with_new_tree_and_parents(subtree_hash, parents)

        if len(parents) == 1:
            parent = self.cache.get_commit(parents[0], self.backend)
            if parent.tree_hash == subtree_hash:
                logger.debug("Collapsed %s onto %s", commit_hash, parents[0])
                self.collapsed += 1
                return parents[0]

        new_hash = self.backend.add_object(derived)
        self.cache.add_commit(derived.with_hash(new_hash))
        self.objects_written += 1
        logger.debug("Rewrote %s as %s", commit_hash, new_hash)
        return new_hash


def remap_parents(parent_hashes: Iterable[str], mapping: Mapping[str, str]) -> List[str]:
    """Translate parents through a subfolder mapping.

    Parents without an entry never had the subfolder and are dropped.
    Duplicates are removed, keeping the first occurrence.
    """
    parents: List[str] = []
    for parent in parent_hashes:
        new_parent = mapping.get(parent)
        if new_parent is not None and new_parent not in parents:
            parents.append(new_parent)
    return parents
