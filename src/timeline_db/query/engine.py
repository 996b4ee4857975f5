"""Filter-and-project query engine over entity directories."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path

from loguru import logger

from timeline_db.exceptions import ParseError
from timeline_db.models.entity import TimelineEntity
from timeline_db.models.query import EntityFilters, Projection
from timeline_db.query.matchers import DEFAULT_MATCHERS, FilterMatchers
from timeline_db.query.projection import project
from timeline_db.storage.layout import StorageLayout
from timeline_db.storage.reader import EntityReader
from timeline_db.storage.scanner import EntityFileScanner

__all__ = ["EntityQueryEngine"]


class EntityQueryEngine:
    """
    Query entities stored in an entity-type directory.

    The engine holds no per-query state and may be shared between threads.
    Entity files are opened one at a time.

    Parameters
    ----------
    reader : EntityReader
        Reader used to reconstruct each candidate entity
    matchers : FilterMatchers, optional
        Filter predicates, by default :data:`DEFAULT_MATCHERS`
    skip_corrupt : bool, optional
        Skip candidates whose records cannot be decoded instead of failing
        the whole query, by default False

    Examples
    --------
    >>> engine = EntityQueryEngine(EntityReader(EntityCodec()))
    >>> entities = engine.query_many(
    ...     Path("/data/timeline/entities/c1/u/f/1/app_1/YARN_CONTAINER"),
    ...     "YARN_CONTAINER",
    ...     EntityFilters(limit=10),
    ...     Projection.all(),
    ... )
    """

    def __init__(
        self,
        reader: EntityReader,
        matchers: FilterMatchers = DEFAULT_MATCHERS,
        skip_corrupt: bool = False,
    ) -> None:
        self.reader = reader
        self.matchers = matchers
        self.skip_corrupt = skip_corrupt

    def query_one(
        self,
        directory: Path,
        entity_id: str,
        projection: Projection | None = None,
    ) -> TimelineEntity | None:
        """
        Fetch a single entity.

        Parameters
        ----------
        directory : Path
            Entity-type directory
        entity_id : str
            Entity identifier
        projection : Projection | None, optional
            Field groups to return

        Returns
        -------
        TimelineEntity | None
            Projected entity, or None if no file backs ``entity_id``

        Raises
        ------
        ParseError
            If the entity file is corrupt
        OSError
            On I/O failures other than a missing file
        """
        entity_file = StorageLayout.entity_file(directory, entity_id)
        try:
            entity = self.reader.read_file(entity_file)
        except FileNotFoundError:
            logger.debug(f"No entity file for {entity_id=} in {directory}")
            return None
        return project(entity, projection)

    def query_many(
        self,
        directory: Path,
        entity_type: str,
        filters: EntityFilters,
        projection: Projection | None = None,
    ) -> list[TimelineEntity]:
        """
        Scan ``directory`` and return entities passing ``filters``.

        Results are ordered by descending created time and hold at most
        ``filters.limit`` entities. Entities sharing a created time are
        ordered by ``(type, id)``.

        Parameters
        ----------
        directory : Path
            Entity-type directory to scan
        entity_type : str
            Only entities of this type are returned
        filters : EntityFilters
            Filter predicates and result limit
        projection : Projection | None, optional
            Field groups to return

        Returns
        -------
        list[TimelineEntity]
            Matching projected entities; empty when nothing matches

        Raises
        ------
        ParseError
            If a candidate file is corrupt and ``skip_corrupt`` is False
        OSError
            On I/O failures
        """
        buckets: dict[int, list[TimelineEntity]] = defaultdict(list)
        n_scanned = 0
        for entity_file in EntityFileScanner(directory).scan():
            n_scanned += 1
            try:
                entity = self.reader.read_file(entity_file)
            except ParseError as e:
                if not self.skip_corrupt:
                    raise
                logger.warning(f"Skipping corrupt entity file: {e}")
                continue
            if entity.type != entity_type:
                continue
            if not self.passes_filters(entity, filters):
                continue
            result = project(entity, projection)
            buckets[result.created_time].append(result)

        entities: list[TimelineEntity] = []
        for created_time in sorted(buckets, reverse=True):
            for entity in sorted(buckets[created_time], key=lambda e: e.identifier):
                entities.append(entity)
                if len(entities) >= filters.limit:
                    break
            if len(entities) >= filters.limit:
                break

        logger.debug(
            f"Scanned {n_scanned} files in {directory}: "
            f"{sum(len(b) for b in buckets.values())} matched {entity_type=}, "
            f"returning {len(entities)} ({filters.limit=})"
        )
        return entities

    def passes_filters(self, entity: TimelineEntity, filters: EntityFilters) -> bool:
        """Apply the filter pipeline, stopping at the first failing predicate."""
        if not filters.in_time_range(entity.created_time):
            return False
        if filters.relates_to and not self.matchers.relations(
            entity.relates_to, filters.relates_to
        ):
            return False
        if filters.is_related_to and not self.matchers.relations(
            entity.is_related_to, filters.is_related_to
        ):
            return False
        if filters.info_filters and not self.matchers.key_values(
            entity.info, filters.info_filters
        ):
            return False
        if filters.config_filters and not self.matchers.key_values(
            entity.configs, filters.config_filters
        ):
            return False
        if filters.metric_filters and not self.matchers.metrics(
            entity.metrics, filters.metric_filters
        ):
            return False
        if filters.event_filters and not self.matchers.events(
            entity.events, filters.event_filters
        ):
            return False
        return True
