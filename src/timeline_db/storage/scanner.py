"""Entity file scanner.

Lists the entity files of one entity-type directory. Only files carrying the
``.thist`` storage extension are candidates; anything else sharing the
directory (index or metadata files written alongside) is ignored.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from loguru import logger

from timeline_db.constants import TIMELINE_STORAGE_EXTENSION

__all__ = ["EntityFileScanner", "is_entity_file"]


def is_entity_file(path: str | Path) -> bool:
    """Check whether ``path`` names an entity file.

    Examples
    --------
    >>> is_entity_file("container_1.thist")
    True
    >>> is_entity_file("app_flow_mapping.csv")
    False
    """
    return TIMELINE_STORAGE_EXTENSION in Path(path).name


class EntityFileScanner:
    """Scanner for a directory of entity files.

    Parameters
    ----------
    directory : str | Path
        Entity-type directory to scan

    Examples
    --------
    >>> scanner = EntityFileScanner("/data/timeline/entities/c1/u/f/1/app_1/YARN_CONTAINER")
    >>> for path in scanner.scan():
    ...     print(path.name)
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def scan(self) -> Iterator[Path]:
        """Yield entity files in name order.

        A missing directory yields nothing: no entity of that type has been
        written yet.

        Yields
        ------
        Path
            Path of each entity file
        """
        if not self.directory.is_dir():
            logger.debug(f"Entity directory does not exist: {self.directory}")
            return

        for path in sorted(self.directory.iterdir()):
            if not path.is_file() or not is_entity_file(path):
                continue
            yield path
