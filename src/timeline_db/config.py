"""Reader configuration.

The reader needs a single setting at query time, the storage root. It
defaults to ``$TIMELINE_DB_STORAGE_ROOT`` and falls back to
``/tmp/timeline_service_data``.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from timeline_db.constants import DEFAULT_STORAGE_ROOT, STORAGE_ROOT_ENV

__all__ = ["ReaderConfig", "default_storage_root"]


def default_storage_root() -> Path:
    return Path(os.getenv(STORAGE_ROOT_ENV, DEFAULT_STORAGE_ROOT))


class ReaderConfig(BaseModel):
    """
    Configuration of a :class:`~timeline_db.repository.FileSystemTimelineReader`.

    Examples
    --------
    >>> config = ReaderConfig(root_path="/data/timeline")
    >>> config.root_path
    PosixPath('/data/timeline')
    """

    model_config = ConfigDict(frozen=True)

    root_path: Path = Field(
        default_factory=default_storage_root,
        description="Storage root holding the entities directory",
    )
    skip_corrupt: bool = Field(
        False,
        description="Skip undecodable entity files in multi-entity queries",
    )

    @classmethod
    def from_env(cls) -> ReaderConfig:
        """Build a config from the process environment."""
        return cls(root_path=default_storage_root())
