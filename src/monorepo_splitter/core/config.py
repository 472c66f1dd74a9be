"""Configuration for a monorepo split."""

import json
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, ValidationError, field_validator

from monorepo_splitter.core.errors import ConfigurationError


class SplitConfig(BaseModel):
    """Where the monorepo lives and which subfolders become repositories."""

    monorepo_url: str
    repositories: Dict[str, str]  # subfolder -> target remote URL
    cache_dir: Path

    @field_validator("repositories")
    @classmethod
    def _check_subfolders(cls, value: Dict[str, str]) -> Dict[str, str]:
        if not value:
            raise ValueError("at least one subfolder is required")
        for subfolder in value:
            name = subfolder.strip("/")
            if not name or "/" in name:
                raise ValueError(
                    f"subfolder {subfolder!r} must be a single top-level directory"
                )
        return {subfolder.strip("/"): url for subfolder, url in value.items()}

    @classmethod
    def from_file(cls, path: Path, **overrides: Any) -> "SplitConfig":
        """Load a JSON config file, letting non-empty overrides win."""
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Unable to read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config {path} must hold a JSON object")

        data.update({key: value for key, value in overrides.items() if value})
        return cls.build(**data)

    @classmethod
    def build(cls, **data: Any) -> "SplitConfig":
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @property
    def repo_dir(self) -> Path:
        return self.cache_dir / "repo"

    def ensure_cache_dir(self) -> None:
        """Create the cache directory if needed."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Unable to create directory {self.cache_dir}: {e}"
            ) from e
        if not self.cache_dir.is_dir():
            raise ConfigurationError(f"{self.cache_dir} is not a directory")
