"""Query-side models: context, filters and projection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from timeline_db.constants import DEFAULT_LIMIT, MAX_TIME, Field

__all__ = ["EntityFilters", "Projection", "QueryContext"]


@dataclass(frozen=True)
class QueryContext:
    """Logical address of an entity or a collection of entities.

    ``user_id``, ``flow_name`` and ``flow_run_id`` are the flow routing keys.
    When any of them is missing the flow is looked up in the cluster's
    flow-mapping index by ``app_id``. When ``entity_id`` is None the context
    addresses every entity of ``entity_type`` under the application.
    """

    cluster_id: str
    app_id: str
    entity_type: str
    user_id: str | None = None
    flow_name: str | None = None
    flow_run_id: int | None = None
    entity_id: str | None = None

    @property
    def is_collection(self) -> bool:
        return self.entity_id is None


@dataclass
class EntityFilters:
    """Predicates applied to every candidate of a multi-entity query.

    A filter component that is None or empty always passes. The created time
    range is inclusive on both ends.

    Attributes
    ----------
    limit : int
        Maximum number of entities returned
    created_time_begin : int
        Earliest accepted created time (epoch millis)
    created_time_end : int
        Latest accepted created time (epoch millis)
    relates_to : dict[str, set[str]] | None
        Required ``relates_to`` ids, by entity type
    is_related_to : dict[str, set[str]] | None
        Required ``is_related_to`` ids, by entity type
    info_filters : dict[str, Any] | None
        Required info key/values
    config_filters : dict[str, str] | None
        Required config key/values
    metric_filters : set[str] | None
        Metric ids the entity must carry
    event_filters : set[str] | None
        Event ids the entity must carry
    """

    limit: int = DEFAULT_LIMIT
    created_time_begin: int = 0
    created_time_end: int = MAX_TIME
    relates_to: dict[str, set[str]] | None = None
    is_related_to: dict[str, set[str]] | None = None
    info_filters: dict[str, Any] | None = None
    config_filters: dict[str, str] | None = None
    metric_filters: set[str] | None = None
    event_filters: set[str] | None = None

    def __post_init__(self) -> None:
        if self.limit <= 0:
            msg = f"limit must be a positive integer, got {self.limit}"
            raise ValueError(msg)

    def in_time_range(self, created_time: int) -> bool:
        return self.created_time_begin <= created_time <= self.created_time_end


@dataclass(frozen=True)
class Projection:
    """Field groups to include in query results.

    Identity and created time are always returned. ``fields=None`` (or an
    empty set) returns nothing else; :attr:`Field.ALL` returns every group.

    Examples
    --------
    >>> sorted(f.value for f in Projection.of("CONFIGS", Field.EVENTS).expanded())
    ['CONFIGS', 'EVENTS']
    >>> len(Projection.all().expanded())
    6
    """

    fields: frozenset[Field] | None = None

    @classmethod
    def of(cls, *fields: Field | str) -> Projection:
        return cls(frozenset(Field(f) for f in fields))

    @classmethod
    def all(cls) -> Projection:
        return cls(frozenset({Field.ALL}))

    def expanded(self) -> frozenset[Field]:
        """Concrete groups selected, with ``ALL`` expanded."""
        if not self.fields:
            return frozenset()
        if Field.ALL in self.fields:
            return frozenset(Field.groups())
        return frozenset(self.fields)
