"""Data models for icloudy.

This module exports the discovery and copy pipeline data structures.
"""

from icloudy.models.path_info import (
    PathInfo,
    PathMetadata,
    PathSource,
    PathStats,
    PathType,
    SearchOptions,
    SourceKind,
)
from icloudy.models.transfer import CopyOptions, CopyResult, FileAnalysis

__all__ = [
    "CopyOptions",
    "CopyResult",
    "FileAnalysis",
    "PathInfo",
    "PathMetadata",
    "PathSource",
    "PathStats",
    "PathType",
    "SearchOptions",
    "SourceKind",
]
