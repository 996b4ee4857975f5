"""Repository layer for timeline_db.

Provides the public read interface over a file-system timeline store.

Architecture:
    - FileSystemTimelineReader: single-entity fetch and multi-entity query
    - Storage and query layers are composed per reader; no global state
"""

from __future__ import annotations

from .file_api import ENTITY_TABLE_COLUMNS, FileSystemTimelineReader

__all__ = [
    "ENTITY_TABLE_COLUMNS",
    "FileSystemTimelineReader",
]
