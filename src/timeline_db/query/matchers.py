"""Filter predicates for multi-entity queries.

Each matcher compares one group of an entity against the corresponding
filter expression and returns whether the entity passes. Matchers never see
empty expressions; the engine treats those as passing without a call.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, NamedTuple

from timeline_db.models.entity import TimelineEvent, TimelineMetric

__all__ = [
    "DEFAULT_MATCHERS",
    "FilterMatchers",
    "match_event_filters",
    "match_filters",
    "match_metric_filters",
    "match_relations",
]


def match_relations(
    entity_relations: Mapping[str, set[str]],
    relations: Mapping[str, Iterable[str]],
) -> bool:
    """Every filter entity type must be present and hold every filter id.

    Examples
    --------
    >>> match_relations({"flow": {"f1", "f2"}}, {"flow": ["f1"]})
    True
    >>> match_relations({"flow": {"f1"}}, {"flow": ["f1"], "task": ["t1"]})
    False
    """
    for entity_type, entity_ids in relations.items():
        ids = entity_relations.get(entity_type)
        if ids is None:
            return False
        for entity_id in entity_ids:
            if entity_id not in ids:
                return False
    return True


def match_filters(values: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """Every filter key must be present with an equal value.

    Used for both ``info`` and ``configs``.

    Examples
    --------
    >>> match_filters({"queue": "default", "vcores": 2}, {"vcores": 2})
    True
    >>> match_filters({"queue": "default"}, {"queue": "etl"})
    False
    """
    for key, expected in filters.items():
        if key not in values or values[key] is None:
            return False
        if values[key] != expected:
            return False
    return True


def match_metric_filters(
    metrics: Iterable[TimelineMetric], metric_ids: Iterable[str]
) -> bool:
    """Every filter id must name one of the entity's metrics."""
    entity_metric_ids = {metric.id for metric in metrics}
    return all(metric_id in entity_metric_ids for metric_id in metric_ids)


def match_event_filters(
    events: Iterable[TimelineEvent], event_ids: Iterable[str]
) -> bool:
    """Every filter id must name one of the entity's events."""
    entity_event_ids = {event.id for event in events}
    return all(event_id in entity_event_ids for event_id in event_ids)


class FilterMatchers(NamedTuple):
    """Matcher functions used by the query engine.

    Replace individual members with ``DEFAULT_MATCHERS._replace(...)``.
    """

    relations: Callable[[Mapping[str, set[str]], Mapping[str, Iterable[str]]], bool]
    key_values: Callable[[Mapping[str, Any], Mapping[str, Any]], bool]
    metrics: Callable[[Iterable[TimelineMetric], Iterable[str]], bool]
    events: Callable[[Iterable[TimelineEvent], Iterable[str]], bool]


DEFAULT_MATCHERS = FilterMatchers(
    relations=match_relations,
    key_values=match_filters,
    metrics=match_metric_filters,
    events=match_event_filters,
)
