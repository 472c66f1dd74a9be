"""Tree model for split histories."""

from typing import Dict, Optional

from pydantic import BaseModel


class Tree(BaseModel):
    """Represents a git tree, reduced to its directory entries."""

    hash: str
    subtrees: Dict[str, str] = {}  # entry name -> tree hash

    model_config = {"frozen": True}

    def get_subtree_hash(self, path: str) -> Optional[str]:
        """Get the tree hash of a top-level subfolder, if present."""
        return self.subtrees.get(path.strip("/"))

    def has_subtree(self, path: str) -> bool:
        return self.get_subtree_hash(path) is not None
