"""Git object backend for the splitter, built on GitPython."""

import logging
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Protocol

import git
from git import Repo
from git.objects.fun import tree_entries_from_data
from git.refs import RemoteReference
from gitdb import IStream
from gitdb.exc import BadName, BadObject
from gitdb.util import bin_to_hex, hex_to_bin

from monorepo_splitter.core.errors import BackendError
from monorepo_splitter.models import Commit, Tree

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (git.exc.GitError, BadName, BadObject, ValueError)

# Object type bits of a tree entry mode
_TYPE_MASK = 0o170000
_TREE_MODE = 0o040000


class Backend(Protocol):
    """Operations the split core needs from a git object store."""

    def initialize(self) -> None: ...

    def add_remote(self, name: str, url: str) -> None: ...

    def fetch(self, remote_name: str) -> None: ...

    def fetch_tags(self, remote_name: str, ref_prefix: str) -> None: ...

    def get_remote_branches(self, remote_name: str) -> Dict[str, str]: ...

    def get_commit(self, commit_hash: str) -> Commit: ...

    def get_tree(self, tree_hash: str) -> Tree: ...

    def add_object(self, commit: Commit) -> str: ...

    def add_branch(self, name: str, commit_hash: str) -> None: ...

    def push(self, remote_url: str, refspecs: List[str]) -> None: ...


class GitBackend:
    """Reads and writes raw git objects in a bare scratch repository."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        """Get the git repository, opening it if needed."""
        if self._repo is None:
            self._repo = Repo(self.path)
        return self._repo

    def initialize(self) -> None:
        """Create an empty bare repository."""
        self.path.mkdir(parents=True, exist_ok=True)
        try:
            self._repo = Repo.init(self.path, bare=True)
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Unable to initialize {self.path}: {e}") from e

    def add_remote(self, name: str, url: str) -> None:
        try:
            self.repo.create_remote(name, url)
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Unable to add remote {name}: {e}") from e

    def fetch(self, remote_name: str) -> None:
        """Fetch all branches of a remote, without its tags."""
        logger.debug("Fetching branches from %s", remote_name)
        try:
            self.repo.remote(remote_name).fetch(no_tags=True)
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Fetching {remote_name} failed: {e}") from e

    def fetch_tags(self, remote_name: str, ref_prefix: str) -> None:
        """Fetch the tags of a remote into ``refs/tags/<ref_prefix>``."""
        logger.debug("Fetching tags from %s into %s", remote_name, ref_prefix)
        try:
            self.repo.git.fetch(
                remote_name, "--no-tags", f"+refs/tags/*:refs/tags/{ref_prefix}*"
            )
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Fetching tags of {remote_name} failed: {e}") from e

    def get_remote_branches(self, remote_name: str) -> Dict[str, str]:
        """Map each branch of a fetched remote to its tip commit hash."""
        branches = {}
        try:
            for ref in RemoteReference.iter_items(self.repo, remote=remote_name):
                if ref.remote_head == "HEAD":
                    continue
                branches[ref.remote_head] = ref.object.hexsha
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Unable to list branches of {remote_name}: {e}") from e
        return branches

    def get_commit(self, commit_hash: str) -> Commit:
        data = self._read_object(commit_hash, "commit")
        try:
            return Commit.from_raw(commit_hash, data)
        except ValueError as e:
            raise BackendError(f"Unable to parse commit {commit_hash}: {e}") from e

    def get_tree(self, tree_hash: str) -> Tree:
        """Read a tree, keeping only its directory entries."""
        data = self._read_object(tree_hash, "tree")
        try:
            subtrees = {
                name: bin_to_hex(binsha).decode("ascii")
                for binsha, mode, name in tree_entries_from_data(data)
                if mode & _TYPE_MASK == _TREE_MODE
            }
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Unable to parse tree {tree_hash}: {e}") from e
        return Tree(hash=tree_hash, subtrees=subtrees)

    def add_object(self, commit: Commit) -> str:
        """Write a commit object and return its hash."""
        data = commit.to_raw()
        try:
            istream = self.repo.odb.store(IStream("commit", len(data), BytesIO(data)))
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Unable to write commit: {e}") from e
        return bin_to_hex(istream.binsha).decode("ascii")

    def add_branch(self, name: str, commit_hash: str) -> None:
        """Create or move ``refs/heads/<name>``."""
        try:
            self.repo.create_head(name, commit_hash, force=True)
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Unable to create branch {name}: {e}") from e

    def push(self, remote_url: str, refspecs: List[str]) -> None:
        logger.debug("Pushing %s to %s", refspecs, remote_url)
        try:
            self.repo.git.push(remote_url, *refspecs)
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Pushing to {remote_url} failed: {e}") from e

    def _read_object(self, object_hash: str, expected_type: str) -> bytes:
        try:
            stream = self.repo.odb.stream(hex_to_bin(object_hash))
            data = stream.read()
        except _BACKEND_ERRORS as e:
            raise BackendError(f"Unable to read object {object_hash}: {e}") from e
        if _type_name(stream.type) != expected_type:
            raise BackendError(f"{object_hash} is not a {expected_type}")
        return data


def _type_name(object_type) -> str:
    if isinstance(object_type, bytes):
        return object_type.decode("ascii")
    return object_type
