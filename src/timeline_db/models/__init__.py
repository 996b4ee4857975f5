"""Data models for timeline_db.

Dataclasses for entities and queries, the adaptix-backed record codec, and
pydantic schemas used at the CLI boundary.
"""

from __future__ import annotations

from .codec import EntityCodec
from .entity import TimelineEntity, TimelineEvent, TimelineMetric
from .query import EntityFilters, Projection, QueryContext
from .schemas import EntityFiltersInput, QueryContextInput

__all__ = [
    "EntityCodec",
    "EntityFilters",
    "EntityFiltersInput",
    "Projection",
    "QueryContext",
    "QueryContextInput",
    "TimelineEntity",
    "TimelineEvent",
    "TimelineMetric",
]
