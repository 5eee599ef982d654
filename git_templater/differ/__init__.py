"""Folder-tree comparison.

Public API
----------
.. autoclass:: DiffEngine
.. autoclass:: DiffReport
.. autoclass:: DiffEntry
.. autoclass:: LineEdit
"""

from .engine import UNREADABLE_CONTENT, DiffEngine, positional_line_diff, split_lines
from .models import DiffEntry, DiffReport, DiffStatus, DiffSummary, LineEdit, LineEditKind
from .report import render_report, write_report

__all__ = [
    "UNREADABLE_CONTENT",
    "DiffEngine",
    "DiffEntry",
    "DiffReport",
    "DiffStatus",
    "DiffSummary",
    "LineEdit",
    "LineEditKind",
    "positional_line_diff",
    "render_report",
    "split_lines",
    "write_report",
]
