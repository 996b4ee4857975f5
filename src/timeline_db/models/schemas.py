"""Pydantic schemas for the CLI boundary.

These schemas validate user input before it is turned into the internal
query dataclasses (:class:`~timeline_db.models.query.QueryContext`,
:class:`~timeline_db.models.query.EntityFilters`). Internal code works with
the dataclasses only.

Design Pattern
--------------
- Dataclasses for internal operations (storage, query layers)
- Pydantic for validation at boundaries (CLI options)
- ``to_context()`` / ``to_filters()`` convert validated input

Examples
--------
CLI filter options:
    >>> data = EntityFiltersInput(
    ...     limit=10,
    ...     info_filters=["vcores=2"],
    ...     relates_to=["flow:f1"],
    ... )
    >>> filters = data.to_filters()
    >>> filters.info_filters, filters.relates_to
    ({'vcores': 2}, {'flow': {'f1'}})
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from timeline_db.constants import DEFAULT_LIMIT, MAX_TIME
from timeline_db.models.query import EntityFilters, QueryContext

__all__ = [
    "EntityFiltersInput",
    "QueryContextInput",
    "parse_key_value",
    "parse_relation",
]


def parse_key_value(expr: str, typed: bool = True) -> tuple[str, Any]:
    """
    Parse a ``key=value`` filter expression.

    With ``typed`` the value is decoded as JSON when possible so that
    ``vcores=2`` matches an integer info value; otherwise it stays a string.

    Examples
    --------
    >>> parse_key_value("vcores=2")
    ('vcores', 2)
    >>> parse_key_value("queue=default")
    ('queue', 'default')
    >>> parse_key_value("vcores=2", typed=False)
    ('vcores', '2')
    """
    key, sep, value = expr.partition("=")
    key = key.strip()
    if not sep or not key:
        msg = f"Expected key=value, got {expr!r}"
        raise ValueError(msg)
    if not typed:
        return key, value
    try:
        return key, json.loads(value)
    except ValueError:
        return key, value


def parse_relation(expr: str) -> tuple[str, set[str]]:
    """
    Parse an ``entity_type:id1,id2`` relation expression.

    Examples
    --------
    >>> parse_relation("YARN_FLOW:flow_1")
    ('YARN_FLOW', {'flow_1'})
    """
    entity_type, sep, ids = expr.partition(":")
    entity_type = entity_type.strip()
    entity_ids = {i.strip() for i in ids.split(",") if i.strip()}
    if not sep or not entity_type or not entity_ids:
        msg = f"Expected entity_type:id1,id2, got {expr!r}"
        raise ValueError(msg)
    return entity_type, entity_ids


class QueryContextInput(BaseModel):
    """
    Schema for the routing part of a CLI query.

    Examples
    --------
    >>> data = QueryContextInput(cluster_id="c1", app_id="app_1", entity_type="YARN_CONTAINER")
    >>> data.to_context().is_collection
    True
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    cluster_id: str = Field(..., min_length=1, description="Cluster identifier")
    app_id: str = Field(..., min_length=1, description="Application identifier")
    entity_type: str = Field(..., min_length=1, description="Entity type")
    user_id: str | None = Field(None, min_length=1, description="Flow owner")
    flow_name: str | None = Field(None, min_length=1, description="Flow name")
    flow_run_id: int | None = Field(None, ge=0, description="Flow run identifier")
    entity_id: str | None = Field(None, min_length=1, description="Entity identifier")

    def to_context(self) -> QueryContext:
        return QueryContext(**self.model_dump())


class EntityFiltersInput(BaseModel):
    """
    Schema for multi-entity query filters given on the command line.

    ``info_filters`` and ``config_filters`` accept ``key=value`` strings,
    ``relates_to`` and ``is_related_to`` accept ``type:id1,id2`` strings,
    in addition to their parsed forms.
    """

    limit: int = Field(DEFAULT_LIMIT, ge=1, description="Maximum results")
    created_time_begin: int = Field(0, ge=0, description="Earliest created time (ms)")
    created_time_end: int = Field(MAX_TIME, ge=0, description="Latest created time (ms)")
    relates_to: dict[str, set[str]] | None = None
    is_related_to: dict[str, set[str]] | None = None
    info_filters: dict[str, Any] | None = None
    config_filters: dict[str, str] | None = None
    metric_filters: set[str] | None = None
    event_filters: set[str] | None = None

    @field_validator("relates_to", "is_related_to", mode="before")
    @classmethod
    def _parse_relations(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            relations: dict[str, set[str]] = {}
            for expr in value:
                entity_type, entity_ids = parse_relation(expr)
                relations.setdefault(entity_type, set()).update(entity_ids)
            return relations or None
        return value

    @field_validator("info_filters", mode="before")
    @classmethod
    def _parse_info(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return dict(parse_key_value(expr) for expr in value) or None
        return value

    @field_validator("config_filters", mode="before")
    @classmethod
    def _parse_configs(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return dict(parse_key_value(expr, typed=False) for expr in value) or None
        return value

    @field_validator("metric_filters", "event_filters", mode="before")
    @classmethod
    def _empty_as_none(cls, value: Any) -> Any:
        if value is not None and len(value) == 0:
            return None
        return value

    @model_validator(mode="after")
    def _check_time_range(self) -> EntityFiltersInput:
        if self.created_time_begin > self.created_time_end:
            msg = (
                f"created_time_begin ({self.created_time_begin}) is after "
                f"created_time_end ({self.created_time_end})"
            )
            raise ValueError(msg)
        return self

    def to_filters(self) -> EntityFilters:
        return EntityFilters(**self.model_dump())
