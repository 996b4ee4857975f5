"""timeline_db: read path of a file-system timeline entity store."""

from __future__ import annotations

from timeline_db.config import ReaderConfig
from timeline_db.constants import Field
from timeline_db.exceptions import ParseError, ResolutionError, TimelineReaderError
from timeline_db.models import (
    EntityCodec,
    EntityFilters,
    Projection,
    QueryContext,
    TimelineEntity,
    TimelineEvent,
    TimelineMetric,
)
from timeline_db.repository import FileSystemTimelineReader

__all__ = [
    "EntityCodec",
    "EntityFilters",
    "Field",
    "FileSystemTimelineReader",
    "ParseError",
    "Projection",
    "QueryContext",
    "ReaderConfig",
    "ResolutionError",
    "TimelineEntity",
    "TimelineEvent",
    "TimelineMetric",
    "TimelineReaderError",
]
