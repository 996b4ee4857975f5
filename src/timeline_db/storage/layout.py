"""On-disk layout of the timeline store."""

from __future__ import annotations

from pathlib import Path

from timeline_db.constants import (
    APP_FLOW_MAPPING_FILE,
    ENTITIES_DIR,
    TIMELINE_STORAGE_EXTENSION,
)

__all__ = ["StorageLayout"]


class StorageLayout:
    """
    Path arithmetic over a storage root. Performs no I/O.

    Layout::

        <root>/entities/<cluster>/app_flow_mapping.csv
        <root>/entities/<cluster>/<user>/<flow>/<flowrun>/<app>/<type>/<id>.thist

    Parameters
    ----------
    root_path : str | Path
        Storage root directory

    Examples
    --------
    >>> layout = StorageLayout("/data/timeline")
    >>> layout.entity_type_dir("c1", "u/f/1", "app_1", "YARN_CONTAINER").as_posix()
    '/data/timeline/entities/c1/u/f/1/app_1/YARN_CONTAINER'
    """

    def __init__(self, root_path: str | Path) -> None:
        self.root_path = Path(root_path)

    @property
    def entities_dir(self) -> Path:
        return self.root_path / ENTITIES_DIR

    def cluster_dir(self, cluster_id: str) -> Path:
        return self.entities_dir / cluster_id

    def flow_mapping_file(self, cluster_id: str) -> Path:
        return self.cluster_dir(cluster_id) / APP_FLOW_MAPPING_FILE

    def entity_type_dir(
        self,
        cluster_id: str,
        flow_run_path: str,
        app_id: str,
        entity_type: str,
    ) -> Path:
        """Directory holding every entity file of one type under an application."""
        return self.cluster_dir(cluster_id) / flow_run_path / app_id / entity_type

    @staticmethod
    def entity_file(entity_type_dir: Path, entity_id: str) -> Path:
        return entity_type_dir / f"{entity_id}{TIMELINE_STORAGE_EXTENSION}"

    def __repr__(self) -> str:
        return f"StorageLayout({str(self.root_path)!r})"
