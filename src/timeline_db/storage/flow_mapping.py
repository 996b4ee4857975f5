"""Flow run path resolution.

Entities are stored under ``<user>/<flow>/<flowrun>``. Callers that know the
flow routing keys get the path directly; otherwise the application is looked
up in the per-cluster ``app_flow_mapping.csv`` index, whose rows are::

    APP,USER,FLOW,FLOWRUN
    app_1,alice,wordcount,1425016501000
"""

from __future__ import annotations

import csv
from pathlib import Path

from loguru import logger

from timeline_db.exceptions import ResolutionError
from timeline_db.storage.layout import StorageLayout

__all__ = ["FlowPathResolver", "make_flow_run_path"]


def make_flow_run_path(user_id: str, flow_name: str, flow_run_id: int | str) -> str:
    """Compose the relative flow run path ``user/flow/flowrun``."""
    return f"{user_id}/{flow_name}/{flow_run_id}"


class FlowPathResolver:
    """
    Resolve query routing keys to a relative flow run path.

    Parameters
    ----------
    layout : StorageLayout
        Storage layout used to locate the flow-mapping index

    Examples
    --------
    >>> resolver = FlowPathResolver(StorageLayout("/data/timeline"))
    >>> resolver.resolve("c1", "app_1", user_id="u2", flow_name="f2", flow_run_id=9)
    'u2/f2/9'
    """

    def __init__(self, layout: StorageLayout) -> None:
        self.layout = layout

    def resolve(
        self,
        cluster_id: str | None,
        app_id: str | None,
        user_id: str | None = None,
        flow_name: str | None = None,
        flow_run_id: int | str | None = None,
    ) -> str:
        """
        Resolve the flow run path for an application.

        Parameters
        ----------
        cluster_id : str | None
            Cluster identifier, required for the index lookup
        app_id : str | None
            Application identifier, required for the index lookup
        user_id, flow_name, flow_run_id : optional
            Flow routing keys; when all three are given no lookup is done

        Returns
        -------
        str
            Relative path ``user/flow/flowrun``

        Raises
        ------
        ResolutionError
            If routing keys are incomplete and the index lookup fails
        """
        if user_id is not None and flow_name is not None and flow_run_id is not None:
            return make_flow_run_path(user_id, flow_name, flow_run_id)

        if cluster_id is None or app_id is None:
            msg = (
                "Unable to get flow info: cluster_id and app_id are required "
                "when user_id, flow_name and flow_run_id are not all given"
            )
            raise ResolutionError(msg)

        index_file = self.layout.flow_mapping_file(cluster_id)
        flow_run_path = self._lookup(index_file, app_id)
        if flow_run_path is None:
            msg = f"Unable to get flow info: no flow mapping for {app_id=} in {index_file}"
            raise ResolutionError(msg)

        logger.debug(f"Resolved {app_id=} on {cluster_id=} → {flow_run_path} via {index_file}")
        return flow_run_path

    @staticmethod
    def _lookup(index_file: Path, app_id: str) -> str | None:
        """Return the flow run path of the first row matching ``app_id``.

        A row matches when it has at least four fields and its APP field is
        blank or equal to ``app_id``. The header row is read as data; its
        APP field never equals a real application id.
        """
        try:
            with index_file.open(newline="", encoding="utf-8") as f:
                for row in csv.reader(f):
                    if len(row) < 4:
                        continue
                    row_app_id = row[0].strip()
                    if row_app_id and row_app_id != app_id:
                        continue
                    return make_flow_run_path(row[1].strip(), row[2].strip(), row[3].strip())
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            msg = f"Unable to get flow info: cannot read flow mapping index {index_file}: {e}"
            raise ResolutionError(msg) from e
        return None
