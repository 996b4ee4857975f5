"""File-system storage access for timeline_db.

Read-only: layout arithmetic, flow path resolution, entity file discovery
and entity reconstruction.
"""

from __future__ import annotations

from .flow_mapping import FlowPathResolver, make_flow_run_path
from .layout import StorageLayout
from .reader import EntityReader, merge_entities
from .scanner import EntityFileScanner, is_entity_file

__all__ = [
    "EntityFileScanner",
    "EntityReader",
    "FlowPathResolver",
    "StorageLayout",
    "is_entity_file",
    "make_flow_run_path",
    "merge_entities",
]
