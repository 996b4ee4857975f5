"""pytest configuration for timeline_db tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from timeline_db.models.codec import EntityCodec
from timeline_db.repository import FileSystemTimelineReader
from timeline_db.storage.reader import EntityReader

CLUSTER = "cluster1"
USER = "user1"
FLOW = "flow1"
FLOW_RUN = 1
APP = "app1"

APPLICATION = "YARN_APPLICATION"
CONTAINER = "YARN_CONTAINER"

T0 = 1425016501000


def write_records(path: Path, *records: dict[str, Any] | str) -> Path:
    """Write entity records (dicts or raw lines) to ``path``, one per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_flow_mapping(root: Path, cluster: str, rows: list[str]) -> Path:
    """Write an app_flow_mapping.csv (header plus ``rows``) for ``cluster``."""
    path = root / "entities" / cluster / "app_flow_mapping.csv"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(["APP,USER,FLOW,FLOWRUN", *rows]) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def codec() -> EntityCodec:
    return EntityCodec()


@pytest.fixture
def entity_reader(codec) -> EntityReader:
    return EntityReader(codec)


@pytest.fixture
def app_dir(tmp_path) -> Path:
    """Directory of application ``app1`` in flow run ``user1/flow1/1``."""
    return tmp_path / "entities" / CLUSTER / USER / FLOW / str(FLOW_RUN) / APP


@pytest.fixture
def write_entity(app_dir) -> Callable[..., Path]:
    """Write records to ``<app_dir>/<entity_type>/<entity_id>.thist``."""

    def _write(entity_type: str, entity_id: str, *records: dict[str, Any] | str) -> Path:
        return write_records(app_dir / entity_type / f"{entity_id}.thist", *records)

    return _write


@pytest.fixture
def timeline_store(tmp_path, app_dir, write_entity) -> Path:
    """Create a sample timeline store and return its root.

    Layout::

        entities/cluster1/app_flow_mapping.csv
        entities/cluster1/user1/flow1/1/app1/YARN_APPLICATION/app1.thist
        entities/cluster1/user1/flow1/1/app1/YARN_CONTAINER/container_{1..4}.thist
        entities/cluster1/user1/flow1/1/app1/YARN_CONTAINER/task_1.thist (type YARN_TASK)
        entities/cluster1/user1/flow1/1/app1/YARN_CONTAINER/README.txt

    Containers by created time: container_2 (T0+2000), container_1
    (T0+1000), container_3 and container_4 (both T0).
    """
    write_flow_mapping(
        tmp_path,
        CLUSTER,
        [
            "app2,user2,flow2,2",
            f"{APP},{USER},{FLOW},{FLOW_RUN}",
        ],
    )

    write_entity(
        APPLICATION,
        APP,
        {
            "type": APPLICATION,
            "id": APP,
            "createdtime": T0,
            "configs": {"a": "1"},
            "info": {"user": USER},
            "events": [{"id": "APP_CREATED", "timestamp": T0}],
            "metrics": [{"id": "MEMORY", "type": "TIME_SERIES", "values": {str(T0): 10}}],
            "relatesto": {"YARN_FLOW": ["flow1"]},
        },
        {
            "type": APPLICATION,
            "id": APP,
            "createdtime": 0,
            "configs": {"a": "2", "b": "3"},
            "events": [{"id": "APP_FINISHED", "timestamp": T0 + 5000}],
            "metrics": [
                {"id": "MEMORY", "type": "TIME_SERIES", "values": {str(T0 + 1000): 20}}
            ],
            "isrelatedto": {CONTAINER: ["container_1", "container_2"]},
        },
    )

    write_entity(
        CONTAINER,
        "container_1",
        {
            "type": CONTAINER,
            "id": "container_1",
            "createdtime": T0 + 1000,
            "configs": {"queue": "default"},
            "info": {"vcores": 2, "host": "node1"},
            "events": [{"id": "START", "timestamp": T0 + 1000}],
            "metrics": [{"id": "MEMORY", "values": {str(T0 + 1000): 512}}],
            "relatesto": {APPLICATION: [APP]},
        },
    )
    write_entity(
        CONTAINER,
        "container_2",
        {
            "type": CONTAINER,
            "id": "container_2",
            "createdtime": T0 + 2000,
            "configs": {"queue": "etl"},
            "info": {"vcores": 1, "host": "node2"},
            "events": [{"id": "START", "timestamp": T0 + 2000}],
            "relatesto": {APPLICATION: [APP]},
        },
        {
            "type": CONTAINER,
            "id": "container_2",
            "events": [{"id": "FINISH", "timestamp": T0 + 9000}],
        },
    )
    write_entity(
        CONTAINER,
        "container_3",
        {"type": CONTAINER, "id": "container_3", "createdtime": T0, "info": {"vcores": 1}},
    )
    write_entity(
        CONTAINER,
        "container_4",
        {"type": CONTAINER, "id": "container_4", "createdtime": T0, "info": {"vcores": 4}},
    )
    write_entity(
        CONTAINER,
        "task_1",
        {"type": "YARN_TASK", "id": "task_1", "createdtime": T0 + 3000},
    )
    (app_dir / CONTAINER / "README.txt").write_text("not an entity\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def container_dir(timeline_store, app_dir) -> Path:
    return app_dir / CONTAINER


@pytest.fixture
def timeline_reader(timeline_store) -> FileSystemTimelineReader:
    return FileSystemTimelineReader(timeline_store)
