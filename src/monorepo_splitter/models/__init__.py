"""Data models for the monorepo splitter."""

from .commit import Commit
from .tree import Tree

__all__ = ["Commit", "Tree"]
