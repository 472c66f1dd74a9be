"""Error types raised while splitting a monorepo."""

from typing import Any, Optional


class SplitterError(RuntimeError):
    """Base class for fatal split errors.

    ``details`` holds the in-memory data that explains the failure. The CLI
    dumps it before exiting.
    """

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details


class ConfigurationError(SplitterError):
    """The configuration or the cache directory cannot be used."""


class DataIntegrityError(SplitterError):
    """The repository history does not match the configured subfolders."""


class BackendError(SplitterError):
    """The git object backend failed."""
