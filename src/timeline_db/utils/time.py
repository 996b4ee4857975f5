"""Time utility functions."""

from __future__ import annotations

from datetime import datetime, timezone

__all__ = ["to_epoch_millis"]


def to_epoch_millis(value: datetime | int | str) -> int:
    """
    Convert a time value to epoch milliseconds.

    Parameters
    ----------
    value : datetime | int | str
        Epoch millis (int or digit string), ISO-8601 string, or datetime.
        Naive datetimes are taken as UTC.

    Returns
    -------
    int
        Epoch milliseconds

    Raises
    ------
    ValueError
        If ``value`` is a string that is neither digits nor ISO-8601

    Examples
    --------
    >>> to_epoch_millis(1425016501000)
    1425016501000
    >>> to_epoch_millis("1425016501000")
    1425016501000
    >>> to_epoch_millis("2015-02-27T05:55:01Z")
    1425016501000
    """
    if isinstance(value, bool):
        msg = f"Not a time value: {value!r}"
        raise ValueError(msg)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)
