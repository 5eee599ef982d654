"""Folder discovery and development-status analysis.

Public API
----------
.. autoclass:: FolderDescriptor
.. autoclass:: FolderStateAnalyzer
.. autoclass:: AnalysisResult
.. autoclass:: DevelopmentStatus
"""

from .analyzer import FolderStateAnalyzer
from .descriptor import FolderDescriptor
from .models import (
    AnalysisResult,
    ConfigurationCheck,
    DevelopmentStatus,
    FolderState,
    classify_status,
)

__all__ = [
    "AnalysisResult",
    "ConfigurationCheck",
    "DevelopmentStatus",
    "FolderDescriptor",
    "FolderState",
    "FolderStateAnalyzer",
    "classify_status",
]
