"""Read the commit graph reachable from a set of branch tips."""

import logging
from collections import deque
from typing import TYPE_CHECKING, Dict, Iterable

from monorepo_splitter.core.object_cache import ObjectCache
from monorepo_splitter.models import Commit

if TYPE_CHECKING:
    from monorepo_splitter.core.backend import Backend

logger = logging.getLogger(__name__)


def read_commits(
    start_hashes: Iterable[str], cache: ObjectCache, backend: "Backend"
) -> Dict[str, Commit]:
    """Collect every commit reachable from ``start_hashes`` by parent links.

    Each commit is fetched once. The result is ordered by discovery.
    """
    commits: Dict[str, Commit] = {}
    pending = deque(start_hashes)

    while pending:
        current = pending.popleft()
        if current in commits:
            continue
        commit = cache.get_commit(current, backend)
        commits[current] = commit
        pending.extend(commit.parent_hashes)

    logger.debug("Read %d commits", len(commits))
    return commits
