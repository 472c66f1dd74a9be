"""Translation table from original commits to their split counterparts."""

from typing import Dict, Mapping, Optional


class HashMapping:
    """Per-subfolder mapping of original commit hash to rewritten hash.

    All entries for one original commit are recorded together by
    :meth:`commit`, so a commit with any entry is fully processed. The
    scheduler's readiness check relies on that.
    """

    def __init__(self) -> None:
        self._by_subfolder: Dict[str, Dict[str, str]] = {}
        self._done: set = set()

    def get(self, subfolder: str, original_hash: str) -> Optional[str]:
        return self._by_subfolder.get(subfolder, {}).get(original_hash)

    def has_any(self, original_hash: str) -> bool:
        """Check whether the commit was recorded for at least one subfolder."""
        return original_hash in self._done

    def subfolder(self, name: str) -> Mapping[str, str]:
        return self._by_subfolder.get(name, {})

    def subfolders(self):
        return self._by_subfolder.keys()

    def commit(self, original_hash: str, results: Mapping[str, str]) -> None:
        """Record the rewritten hashes of one commit for all its subfolders."""
        if not results:
            raise ValueError(f"No split results for {original_hash}")
        if original_hash in self._done:
            raise ValueError(f"{original_hash} is already mapped")

        for subfolder, new_hash in results.items():
            self._by_subfolder.setdefault(subfolder, {})[original_hash] = new_hash
        self._done.add(original_hash)

    def is_empty(self) -> bool:
        return not self._done

    def as_dict(self) -> Dict[str, Dict[str, str]]:
        return {name: dict(entries) for name, entries in self._by_subfolder.items()}

    def __len__(self) -> int:
        return len(self._done)
