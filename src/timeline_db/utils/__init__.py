"""Utility functions for timeline_db."""

from __future__ import annotations

__all__ = [
    "to_epoch_millis",
]

from .time import to_epoch_millis
