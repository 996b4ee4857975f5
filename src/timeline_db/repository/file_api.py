"""File API layer for the timeline store.

Provides :class:`FileSystemTimelineReader`, the public read interface over a
file-system timeline store. It resolves a query context to the directory of
an application's entities and hands the directory to the query engine.

Architecture:
    - FlowPathResolver: context → ``user/flow/flowrun`` (index fallback)
    - EntityQueryEngine: directory → reconstructed, filtered, projected entities
    - DataFrame summary output for tabular consumers
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from loguru import logger

from timeline_db.config import ReaderConfig
from timeline_db.models.codec import EntityCodec
from timeline_db.models.entity import TimelineEntity
from timeline_db.models.query import EntityFilters, Projection, QueryContext
from timeline_db.query.engine import EntityQueryEngine
from timeline_db.query.matchers import DEFAULT_MATCHERS, FilterMatchers
from timeline_db.storage.flow_mapping import FlowPathResolver
from timeline_db.storage.layout import StorageLayout
from timeline_db.storage.reader import EntityReader

__all__ = ["ENTITY_TABLE_COLUMNS", "FileSystemTimelineReader"]

ENTITY_TABLE_COLUMNS = [
    "type",
    "id",
    "created_time",
    "configs",
    "info",
    "metrics",
    "events",
    "relates_to",
    "is_related_to",
]


class FileSystemTimelineReader:
    """
    Read entities from a file-system timeline store.

    All operations are read-only and idempotent. The reader keeps no state
    between calls and may be shared between threads.

    Parameters
    ----------
    root_path : str | Path | None, optional
        Storage root; defaults to :class:`ReaderConfig` defaults
    codec : EntityCodec | None, optional
        Record codec, a new one by default
    matchers : FilterMatchers | None, optional
        Filter predicates, by default :data:`DEFAULT_MATCHERS`
    skip_corrupt : bool, optional
        Skip corrupt entity files in multi-entity queries, by default False

    Examples
    --------
    >>> reader = FileSystemTimelineReader("/data/timeline")
    >>> context = QueryContext(cluster_id="c1", app_id="app_1", entity_type="YARN_CONTAINER")
    >>> containers = reader.get_entities(context, EntityFilters(limit=10))
    >>> app = reader.get_entity(
    ...     QueryContext("c1", "app_1", "YARN_APPLICATION", entity_id="app_1"),
    ...     Projection.all(),
    ... )
    """

    def __init__(
        self,
        root_path: str | Path | None = None,
        codec: EntityCodec | None = None,
        matchers: FilterMatchers | None = None,
        skip_corrupt: bool = False,
    ) -> None:
        if root_path is None:
            root_path = ReaderConfig().root_path
        self.layout = StorageLayout(root_path)
        self.codec = codec or EntityCodec()
        self.resolver = FlowPathResolver(self.layout)
        self.engine = EntityQueryEngine(
            EntityReader(self.codec),
            matchers=matchers or DEFAULT_MATCHERS,
            skip_corrupt=skip_corrupt,
        )

    @classmethod
    def from_config(cls, config: ReaderConfig, **kwargs) -> FileSystemTimelineReader:
        return cls(config.root_path, skip_corrupt=config.skip_corrupt, **kwargs)

    @property
    def root_path(self) -> Path:
        return self.layout.root_path

    def resolve_entity_dir(self, context: QueryContext) -> Path:
        """
        Resolve the directory holding ``context.entity_type`` entities.

        Raises
        ------
        ResolutionError
            If the flow run of the application cannot be determined
        """
        flow_run_path = self.resolver.resolve(
            context.cluster_id,
            context.app_id,
            user_id=context.user_id,
            flow_name=context.flow_name,
            flow_run_id=context.flow_run_id,
        )
        return self.layout.entity_type_dir(
            context.cluster_id, flow_run_path, context.app_id, context.entity_type
        )

    def get_entity(
        self,
        context: QueryContext,
        projection: Projection | None = None,
    ) -> TimelineEntity | None:
        """
        Fetch the single entity addressed by ``context``.

        Parameters
        ----------
        context : QueryContext
            Query context with ``entity_id`` set
        projection : Projection | None, optional
            Field groups to return; identity and created time only by default

        Returns
        -------
        TimelineEntity | None
            The entity, or None if it does not exist

        Raises
        ------
        ValueError
            If ``context.entity_id`` is not set
        ResolutionError
            If the flow run path cannot be resolved
        ParseError
            If the entity file is corrupt
        """
        if context.entity_id is None:
            msg = "get_entity requires a context with entity_id"
            raise ValueError(msg)
        entity_dir = self.resolve_entity_dir(context)
        entity = self.engine.query_one(entity_dir, context.entity_id, projection)
        if entity is None:
            logger.info(
                f"Cannot find entity {{id: {context.entity_id}, type: {context.entity_type}}}"
            )
        return entity

    def get_entities(
        self,
        context: QueryContext,
        filters: EntityFilters | None = None,
        projection: Projection | None = None,
    ) -> list[TimelineEntity]:
        """
        Query the entities of ``context.entity_type`` under an application.

        Parameters
        ----------
        context : QueryContext
            Query context; ``entity_id`` is ignored
        filters : EntityFilters | None, optional
            Filters and limit, by default :class:`EntityFilters` defaults
        projection : Projection | None, optional
            Field groups to return; identity and created time only by default

        Returns
        -------
        list[TimelineEntity]
            Entities by descending created time, at most ``filters.limit``

        Raises
        ------
        ResolutionError
            If the flow run path cannot be resolved
        ParseError
            If a candidate entity file is corrupt (unless ``skip_corrupt``)
        """
        if filters is None:
            filters = EntityFilters()
        entity_dir = self.resolve_entity_dir(context)
        return self.engine.query_many(entity_dir, context.entity_type, filters, projection)

    def get_entities_table(
        self,
        context: QueryContext,
        filters: EntityFilters | None = None,
        projection: Projection | None = None,
    ) -> pd.DataFrame:
        """
        Query entities and summarize them as a DataFrame.

        One row per entity, in result order. Group columns hold the number
        of entries in each group (0 when the group was not projected).

        Returns
        -------
        pd.DataFrame
            DataFrame with columns :data:`ENTITY_TABLE_COLUMNS`
        """
        entities = self.get_entities(context, filters, projection)
        if not entities:
            return pd.DataFrame(columns=ENTITY_TABLE_COLUMNS)

        data = [
            {
                "type": e.type,
                "id": e.id,
                "created_time": e.created_time,
                "configs": len(e.configs),
                "info": len(e.info),
                "metrics": len(e.metrics),
                "events": len(e.events),
                "relates_to": sum(len(ids) for ids in e.relates_to.values()),
                "is_related_to": sum(len(ids) for ids in e.is_related_to.values()),
            }
            for e in entities
        ]
        return pd.DataFrame(data, columns=ENTITY_TABLE_COLUMNS)
