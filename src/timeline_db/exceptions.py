"""Exceptions raised by the timeline reader."""

from __future__ import annotations

from pathlib import Path

__all__ = ["ParseError", "ResolutionError", "TimelineReaderError"]


class TimelineReaderError(Exception):
    """Base class for timeline reader errors."""


class ResolutionError(TimelineReaderError):
    """A query context could not be resolved to a flow run path.

    Raised when routing keys are missing, when the flow-mapping index is
    missing or unreadable, or when no index row matches the application.
    """


class ParseError(TimelineReaderError, ValueError):
    """An entity record could not be decoded.

    Parameters
    ----------
    message : str
        Description of the failure
    path : Path | None, optional
        Entity file the record was read from
    line_number : int | None, optional
        1-based line number of the record within ``path``
    """

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        line_number: int | None = None,
    ) -> None:
        self.path = path
        self.line_number = line_number
        if path is not None:
            where = f"{path}" if line_number is None else f"{path}:{line_number}"
            message = f"{message} ({where})"
        super().__init__(message)
