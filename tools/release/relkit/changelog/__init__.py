"""Changelog generation from version-control history."""

from .generator import ChangeEntry, ChangeLogDocument, ChangeLogGenerator, ReleaseSection
from .history import HistoryToken, parse_history, parse_line

__all__ = [
    "ChangeEntry",
    "ChangeLogDocument",
    "ChangeLogGenerator",
    "HistoryToken",
    "ReleaseSection",
    "parse_history",
    "parse_line",
]
