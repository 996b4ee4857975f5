"""Constants and enumerations for timeline_db."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "APP_FLOW_MAPPING_FILE",
    "DEFAULT_LIMIT",
    "DEFAULT_STORAGE_ROOT",
    "ENTITIES_DIR",
    "MAX_TIME",
    "STORAGE_ROOT_ENV",
    "TIMELINE_STORAGE_EXTENSION",
    "Field",
    "MetricType",
]

# Storage layout
# <root>/entities/<cluster>/<user>/<flow>/<flowrun>/<app>/<type>/<id>.thist
ENTITIES_DIR = "entities"
TIMELINE_STORAGE_EXTENSION = ".thist"
APP_FLOW_MAPPING_FILE = "app_flow_mapping.csv"

DEFAULT_STORAGE_ROOT = "/tmp/timeline_service_data"
STORAGE_ROOT_ENV = "TIMELINE_DB_STORAGE_ROOT"

# Query defaults
DEFAULT_LIMIT = 100
MAX_TIME = 2**63 - 1  # upper bound of an epoch-millis long


class Field(str, Enum):
    """Entity field groups that can be requested in a query result."""

    CONFIGS = "CONFIGS"
    METRICS = "METRICS"
    INFO = "INFO"
    RELATES_TO = "RELATES_TO"
    IS_RELATED_TO = "IS_RELATED_TO"
    EVENTS = "EVENTS"
    ALL = "ALL"

    @classmethod
    def groups(cls) -> tuple[Field, ...]:
        """Concrete field groups (everything ``ALL`` expands to)."""
        return tuple(f for f in cls if f is not cls.ALL)


class MetricType(str, Enum):
    """Metric kinds as written by the timeline writer."""

    SINGLE_VALUE = "SINGLE_VALUE"
    TIME_SERIES = "TIME_SERIES"
