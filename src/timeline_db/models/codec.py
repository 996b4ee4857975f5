"""JSON codec for timeline entity records.

Entity files hold one JSON object per line. Field names on the wire follow
the timeline writer (``createdtime``, ``relatesto``, ``isrelatedto``); metric
value maps are keyed by decimal timestamp strings. The mapping between the
wire format and :class:`~timeline_db.models.entity.TimelineEntity` is done by
an adaptix ``Retort`` owned by each :class:`EntityCodec` instance.
"""

from __future__ import annotations

import json
from typing import Any

from adaptix import P, Retort, dumper, loader, name_mapping
from adaptix.load_error import LoadError, TypeLoadError, ValueLoadError

from timeline_db.exceptions import ParseError
from timeline_db.models.entity import TimelineEntity, TimelineMetric

__all__ = ["EntityCodec"]


def _load_metric_values(data: Any) -> dict[int, int | float]:
    if not isinstance(data, dict):
        raise TypeLoadError(dict, data)
    values = {}
    for ts, value in data.items():
        try:
            values[int(ts)] = value
        except ValueError:
            raise ValueLoadError(f"Metric timestamp {ts!r} is not an integer", ts) from None
    return values


def _dump_metric_values(values: dict[int, int | float]) -> dict[str, int | float]:
    return {str(ts): value for ts, value in sorted(values.items())}


def _load_relations(data: Any) -> dict[str, set[str]]:
    if not isinstance(data, dict):
        raise TypeLoadError(dict, data)
    relations = {}
    for entity_type, entity_ids in data.items():
        # a bare string would otherwise be split into characters
        if not isinstance(entity_ids, list):
            raise TypeLoadError(list, entity_ids)
        relations[str(entity_type)] = {str(entity_id) for entity_id in entity_ids}
    return relations


def _dump_relations(relations: dict[str, set[str]]) -> dict[str, list[str]]:
    return {entity_type: sorted(ids) for entity_type, ids in relations.items()}


class EntityCodec:
    """Decode and encode entity records.

    The codec is immutable after construction and safe to share between
    threads; pass one instance to every component that reads records.

    Examples
    --------
    >>> codec = EntityCodec()
    >>> entity = codec.decode('{"type": "YARN_APPLICATION", "id": "app_1", "createdtime": 10}')
    >>> entity.identifier, entity.created_time
    (('YARN_APPLICATION', 'app_1'), 10)
    """

    def __init__(self) -> None:
        self._retort = Retort(
            recipe=[
                name_mapping(
                    TimelineEntity,
                    map={
                        "created_time": "createdtime",
                        "relates_to": "relatesto",
                        "is_related_to": "isrelatedto",
                    },
                ),
                loader(P[TimelineEntity].relates_to, _load_relations),
                loader(P[TimelineEntity].is_related_to, _load_relations),
                dumper(P[TimelineEntity].relates_to, _dump_relations),
                dumper(P[TimelineEntity].is_related_to, _dump_relations),
                loader(P[TimelineMetric].values, _load_metric_values),
                dumper(P[TimelineMetric].values, _dump_metric_values),
            ]
        )

    def load(self, data: dict[str, Any]) -> TimelineEntity:
        """Load an already JSON-decoded record.

        Raises
        ------
        ParseError
            If ``data`` does not describe a valid entity
        """
        try:
            return self._retort.load(data, TimelineEntity)
        except LoadError as e:
            msg = f"Invalid entity record: {e}"
            raise ParseError(msg) from e

    def decode(self, line: str) -> TimelineEntity:
        """Decode one JSON line into an entity.

        Raises
        ------
        ParseError
            If ``line`` is not valid JSON or not a valid entity record
        """
        try:
            data = json.loads(line)
        except ValueError as e:
            msg = f"Malformed JSON record: {e}"
            raise ParseError(msg) from e
        return self.load(data)

    def dump(self, entity: TimelineEntity) -> dict[str, Any]:
        return self._retort.dump(entity, TimelineEntity)

    def encode(self, entity: TimelineEntity) -> str:
        """Encode ``entity`` as a single JSON line (no trailing newline)."""
        return json.dumps(self.dump(entity))
