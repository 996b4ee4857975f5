"""Timeline entity records.

Dataclass models for the entities stored in ``.thist`` files. One logical
entity may be spread over several appended records; the mutation helpers
here implement the per-group merge rules used while folding them together
(see :func:`timeline_db.storage.reader.merge_entities`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from timeline_db.constants import MetricType

__all__ = ["TimelineEntity", "TimelineEvent", "TimelineMetric"]


@dataclass
class TimelineEvent:
    """A point-in-time event attached to an entity.

    Attributes
    ----------
    id : str
        Event identifier (e.g. ``YARN_APPLICATION_FINISHED``)
    timestamp : int
        Event time in epoch milliseconds
    info : dict[str, Any]
        Free-form event payload
    """

    id: str
    timestamp: int = 0
    info: dict[str, Any] = field(default_factory=dict)


@dataclass
class TimelineMetric:
    """A metric series keyed by epoch-millis timestamp.

    Attributes
    ----------
    id : str
        Metric identifier
    type : str
        ``SINGLE_VALUE`` or ``TIME_SERIES``
    values : dict[int, int | float]
        Timestamp to value mapping
    """

    id: str
    type: str = MetricType.SINGLE_VALUE.value
    values: dict[int, int | float] = field(default_factory=dict)

    def add_values(self, values: dict[int, int | float]) -> None:
        """Union ``values`` into this series; incoming points win on collision."""
        self.values.update(values)


@dataclass
class TimelineEntity:
    """A timeline entity identified by ``(type, id)``.

    Attributes
    ----------
    type : str
        Entity type (``YARN_APPLICATION``, ``YARN_CONTAINER``, ...)
    id : str
        Entity identifier, unique within its type
    created_time : int
        Creation time in epoch milliseconds, 0 when unset
    configs : dict[str, str]
        Configuration key/values
    info : dict[str, Any]
        Informational key/values
    metrics : list[TimelineMetric]
        Metric series, at most one per metric id after reconstruction
    events : list[TimelineEvent]
        Events in the order they were recorded
    relates_to : dict[str, set[str]]
        Entity ids this entity relates to, by entity type
    is_related_to : dict[str, set[str]]
        Entity ids related to this entity, by entity type
    """

    type: str
    id: str
    created_time: int = 0
    configs: dict[str, str] = field(default_factory=dict)
    info: dict[str, Any] = field(default_factory=dict)
    metrics: list[TimelineMetric] = field(default_factory=list)
    events: list[TimelineEvent] = field(default_factory=list)
    relates_to: dict[str, set[str]] = field(default_factory=dict)
    is_related_to: dict[str, set[str]] = field(default_factory=dict)

    @property
    def identifier(self) -> tuple[str, str]:
        """The immutable ``(type, id)`` identity of this entity."""
        return (self.type, self.id)

    def add_configs(self, configs: dict[str, str]) -> None:
        self.configs.update(configs)

    def add_info(self, info: dict[str, Any]) -> None:
        self.info.update(info)

    def add_relates_to(self, entity_type: str, entity_ids: set[str]) -> None:
        self.relates_to.setdefault(entity_type, set()).update(entity_ids)

    def add_is_related_to(self, entity_type: str, entity_ids: set[str]) -> None:
        self.is_related_to.setdefault(entity_type, set()).update(entity_ids)

    def add_event(self, event: TimelineEvent) -> None:
        self.events.append(event)

    def get_metric(self, metric_id: str) -> TimelineMetric | None:
        for metric in self.metrics:
            if metric.id == metric_id:
                return metric
        return None

    def add_metric(self, metric: TimelineMetric) -> None:
        """Add ``metric``, merging its values into an existing series of the same id."""
        existing = self.get_metric(metric.id)
        if existing is None:
            self.metrics.append(metric)
        else:
            existing.add_values(metric.values)
