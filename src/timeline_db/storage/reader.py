"""Entity reconstruction from appended records.

The writer appends a full entity snapshot to the entity's file every time the
entity is updated. Reading a file folds those records, in file order, into
one current-state entity:

- ``created_time`` is taken from a later record only when it is set (> 0)
- ``configs`` and ``info`` are upserted key by key, later records win
- ``relates_to`` and ``is_related_to`` id sets are unioned per entity type
- ``events`` are appended in file order, without deduplication
- ``metrics`` with the same id have their value maps unioned; new ids are
  appended as new series

Records whose ``(type, id)`` differs from the first record are foreign to the
file and are skipped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from loguru import logger

from timeline_db.exceptions import ParseError
from timeline_db.models.codec import EntityCodec
from timeline_db.models.entity import TimelineEntity

__all__ = ["EntityReader", "merge_entities"]


def merge_entities(target: TimelineEntity, other: TimelineEntity) -> None:
    """Merge record ``other`` into the accumulated entity ``target`` in place.

    Identity is not checked here; callers only merge records of the same
    ``(type, id)``.
    """
    # created_time is fixed once set, unless a later record carries a real value
    if other.created_time > 0:
        target.created_time = other.created_time
    target.add_configs(other.configs)
    target.add_info(other.info)
    for entity_type, entity_ids in other.is_related_to.items():
        target.add_is_related_to(entity_type, entity_ids)
    for entity_type, entity_ids in other.relates_to.items():
        target.add_relates_to(entity_type, entity_ids)
    for event in list(other.events):
        target.add_event(event)
    for metric in other.metrics:
        target.add_metric(metric)


class EntityReader:
    """
    Read entity files and reconstruct the logical entity they hold.

    Parameters
    ----------
    codec : EntityCodec
        Codec used to decode each record

    Examples
    --------
    >>> reader = EntityReader(EntityCodec())
    >>> entity = reader.read([
    ...     '{"type": "YARN_APPLICATION", "id": "app_1", "configs": {"a": "1"}}',
    ...     '{"type": "YARN_APPLICATION", "id": "app_1", "configs": {"a": "2"}}',
    ... ])
    >>> entity.configs
    {'a': '2'}
    """

    def __init__(self, codec: EntityCodec) -> None:
        self.codec = codec

    def read_file(self, path: str | Path) -> TimelineEntity:
        """
        Reconstruct the entity stored in ``path``.

        Parameters
        ----------
        path : str | Path
            Entity file

        Returns
        -------
        TimelineEntity
            Entity folded from every record of the file

        Raises
        ------
        FileNotFoundError
            If ``path`` does not exist
        ParseError
            If the seed record or an interior record cannot be decoded,
            or the file is not valid UTF-8
        OSError
            On any other I/O failure
        """
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                return self.read(f, path=path)
        except UnicodeDecodeError as e:
            raise ParseError(f"Undecodable entity record: {e}", path) from e

    def read(self, lines: Iterable[str], path: Path | None = None) -> TimelineEntity:
        """
        Reconstruct an entity from its records.

        The first line is the seed record and must decode. A malformed line
        after the seed aborts the read, except for the last line: a record
        that is still being appended by the writer is dropped with a warning.

        Parameters
        ----------
        lines : Iterable[str]
            Records, one JSON object per line
        path : Path | None, optional
            Source file, used in error and log messages

        Returns
        -------
        TimelineEntity
            Reconstructed entity

        Raises
        ------
        ParseError
            If the seed record is missing or malformed, or an interior
            record is malformed
        """
        line_iter = iter(enumerate(lines, start=1))
        first = next(line_iter, None)
        if first is None or not first[1].strip():
            raise ParseError("Missing seed entity record", path, 1)
        entity = self._decode(first[1], path, first[0])

        pending_error: ParseError | None = None
        for line_number, line in line_iter:
            if not line.strip():
                continue
            if pending_error is not None:
                raise pending_error
            try:
                record = self._decode(line, path, line_number)
            except ParseError as e:
                pending_error = e
                continue
            if record.identifier != entity.identifier:
                logger.debug(
                    f"Skipping foreign record {record.identifier} in entity "
                    f"{entity.identifier} ({path or '<lines>'}:{line_number})"
                )
                continue
            merge_entities(entity, record)

        if pending_error is not None:
            logger.warning(f"Dropping truncated trailing record: {pending_error}")
        return entity

    def _decode(self, line: str, path: Path | None, line_number: int) -> TimelineEntity:
        try:
            return self.codec.decode(line)
        except ParseError as e:
            raise ParseError(str(e), path, line_number) from e
