"""Commit model for split histories."""

import base64
from typing import Iterable, Optional, Tuple

from pydantic import BaseModel, field_serializer, field_validator


class Commit(BaseModel):
    """Represents a git commit object.

    Only the tree and the parents are interpreted. Every other header
    (author, committer, encoding, ...) and the message are kept as raw
    bytes so a rewritten commit carries them through unchanged.
    """

    hash: Optional[str] = None  # None until written to the object store
    tree_hash: str
    parent_hashes: Tuple[str, ...] = ()
    metadata: bytes

    model_config = {"frozen": True}

    @field_serializer("metadata")
    def _serialize_metadata(self, metadata: bytes) -> str:
        return base64.b64encode(metadata).decode("ascii")

    @field_validator("metadata", mode="before")
    @classmethod
    def _validate_metadata(cls, value):
        if isinstance(value, str):
            return base64.b64decode(value)
        return value

    @classmethod
    def from_raw(cls, commit_hash: str, data: bytes) -> "Commit":
        """Parse the body of a raw git commit object."""
        tree_hash = None
        parents = []
        rest = data
        while rest:
            line, sep, remainder = rest.partition(b"\n")
            if line.startswith(b"tree "):
                tree_hash = line[5:].decode("ascii")
            elif line.startswith(b"parent "):
                parents.append(line[7:].decode("ascii"))
            else:
                break
            rest = remainder

        if tree_hash is None:
            raise ValueError(f"Commit {commit_hash} has no tree header")

        return cls(
            hash=commit_hash,
            tree_hash=tree_hash,
            parent_hashes=tuple(parents),
            metadata=rest,
        )

    def to_raw(self) -> bytes:
        """Serialize back to the body of a git commit object."""
        header = f"tree {self.tree_hash}\n"
        header += "".join(f"parent {parent}\n" for parent in self.parent_hashes)
        return header.encode("ascii") + self.metadata

    def with_new_tree_and_parents(
        self, tree_hash: str, parent_hashes: Iterable[str]
    ) -> "Commit":
        """Derive an unwritten commit with another tree and parents.

        Author, committer, message and other headers are kept byte for byte,
        except a ``gpgsig`` signature, which would not match the new content
        and is dropped.
        """
        return Commit(
            tree_hash=tree_hash,
            parent_hashes=tuple(parent_hashes),
            metadata=_strip_signature(self.metadata),
        )

    def with_hash(self, commit_hash: str) -> "Commit":
        """Return the same commit once its object hash is known."""
        return self.model_copy(update={"hash": commit_hash})

    @property
    def is_merge(self) -> bool:
        return len(self.parent_hashes) > 1


def _strip_signature(metadata: bytes) -> bytes:
    # A gpgsig header signs the original object; it spans continuation
    # lines that start with a single space.
    headers, sep, message = metadata.partition(b"\n\n")
    if not sep:
        headers, message = metadata, b""

    kept = []
    in_signature = False
    for line in headers.split(b"\n"):
        if line.startswith(b"gpgsig ") or line.startswith(b"gpgsig-sha256 "):
            in_signature = True
            continue
        if in_signature and line.startswith(b" "):
            continue
        in_signature = False
        kept.append(line)

    return b"\n".join(kept) + sep + message
