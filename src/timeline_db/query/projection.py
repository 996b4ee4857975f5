"""Field projection of query results."""

from __future__ import annotations

from typing import Callable

from timeline_db.constants import Field
from timeline_db.models.entity import TimelineEntity
from timeline_db.models.query import Projection

__all__ = ["FIELD_COPIERS", "project"]


def _copy_configs(target: TimelineEntity, source: TimelineEntity) -> None:
    target.configs = source.configs


def _copy_metrics(target: TimelineEntity, source: TimelineEntity) -> None:
    target.metrics = source.metrics


def _copy_info(target: TimelineEntity, source: TimelineEntity) -> None:
    target.info = source.info


def _copy_relates_to(target: TimelineEntity, source: TimelineEntity) -> None:
    target.relates_to = source.relates_to


def _copy_is_related_to(target: TimelineEntity, source: TimelineEntity) -> None:
    target.is_related_to = source.is_related_to


def _copy_events(target: TimelineEntity, source: TimelineEntity) -> None:
    target.events = source.events


# Groups are copied by reference from the reconstructed entity
FIELD_COPIERS: dict[Field, Callable[[TimelineEntity, TimelineEntity], None]] = {
    Field.CONFIGS: _copy_configs,
    Field.METRICS: _copy_metrics,
    Field.INFO: _copy_info,
    Field.RELATES_TO: _copy_relates_to,
    Field.IS_RELATED_TO: _copy_is_related_to,
    Field.EVENTS: _copy_events,
}


def project(entity: TimelineEntity, projection: Projection | None) -> TimelineEntity:
    """
    Build the result entity holding only the requested field groups.

    Parameters
    ----------
    entity : TimelineEntity
        Reconstructed source entity
    projection : Projection | None
        Requested groups; None returns identity and created time only

    Returns
    -------
    TimelineEntity
        New entity with identity, created time and the requested groups;
        every other group is left empty

    Examples
    --------
    >>> source = TimelineEntity("YARN_APPLICATION", "app_1", 10, configs={"a": "1"})
    >>> project(source, None).configs
    {}
    >>> project(source, Projection.of(Field.CONFIGS)).configs
    {'a': '1'}
    """
    result = TimelineEntity(type=entity.type, id=entity.id, created_time=entity.created_time)
    if projection is None:
        return result
    for field in projection.expanded():
        FIELD_COPIERS[field](result, entity)
    return result
