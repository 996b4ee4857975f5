"""Query engine, filter matchers and field projection."""

from __future__ import annotations

from .engine import EntityQueryEngine
from .matchers import (
    DEFAULT_MATCHERS,
    FilterMatchers,
    match_event_filters,
    match_filters,
    match_metric_filters,
    match_relations,
)
from .projection import FIELD_COPIERS, project

__all__ = [
    "DEFAULT_MATCHERS",
    "FIELD_COPIERS",
    "EntityQueryEngine",
    "FilterMatchers",
    "match_event_filters",
    "match_filters",
    "match_metric_filters",
    "match_relations",
    "project",
]
