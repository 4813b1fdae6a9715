"""Filesystem path evaluation.

Inspects a single candidate path and turns what the filesystem reports
into a score plus facts (existence, accessibility, markers). Every
filesystem error is absorbed: a broken or locked path only lowers the
score.
"""

import logging
import ntpath
import os
import posixpath
import stat
from dataclasses import dataclass, field
from datetime import UTC, datetime

from icloudy.core.config import ScoringConfig
from icloudy.discovery.identity import is_app_storage_name
from icloudy.models.path_info import PathMetadata, PathStats, PathType

logger = logging.getLogger(__name__)

# Basenames that identify a drive root on either platform
ROOT_DIR_NAMES: frozenset[str] = frozenset(
    {"com~apple~CloudDocs", "iCloudDrive", "iCloud Drive", "CloudDocs"}
)

_MARKER_SUBSTRINGS: tuple[str, ...] = ("~com~", ".icloud", "desktop.ini")
_MARKER_PREFIX = "iCloud~"


@dataclass(slots=True)
class Evaluation:
    """Result of evaluating one path.

    Attributes:
        path: The evaluated path string, unchanged.
        exists: Path exists (possibly locked).
        is_accessible: Path could be stat'ed and, for directories, listed.
        score: Additive confidence score.
        type: Path category derived from the basename.
        metadata: Stats, listing and marker facts.
    """

    path: str
    exists: bool = False
    is_accessible: bool = False
    score: int = 0
    type: PathType = PathType.OTHER
    metadata: PathMetadata = field(default_factory=PathMetadata)


def has_icloud_marker(name: str) -> bool:
    """Check whether a directory entry name marks a sync-managed folder.

    Args:
        name: Basename of a directory entry.

    Returns:
        True for names containing ``~com~``, ``.icloud`` or ``desktop.ini``,
        or starting with ``iCloud~``.
    """
    if name.startswith(_MARKER_PREFIX):
        return True
    return any(marker in name for marker in _MARKER_SUBSTRINGS)


def path_basename(path: str) -> str:
    """Return the last component of a path in either OS convention."""
    stripped = path.rstrip("/\\")
    return ntpath.basename(stripped) if "\\" in stripped else posixpath.basename(stripped)


def classify_path(path: str) -> PathType:
    """Derive a path category from its basename.

    Args:
        path: Filesystem path string.

    Returns:
        PathType for the path.
    """
    basename = path_basename(path)
    if basename in ROOT_DIR_NAMES:
        return PathType.ROOT
    if is_app_storage_name(basename):
        return PathType.APP_STORAGE

    lowered = basename.lower()
    if "photos" in lowered:
        return PathType.PHOTOS
    if "documents" in lowered:
        return PathType.DOCUMENTS
    return PathType.OTHER


def _format_mtime(timestamp: float) -> str:
    """ISO 8601 UTC string for a stat mtime, or "" if it is out of range."""
    try:
        return datetime.fromtimestamp(timestamp, tz=UTC).isoformat()
    except (ValueError, OverflowError, OSError):
        logger.debug("Unrepresentable mtime: %s", timestamp)
        return ""


class PathEvaluator:
    """Scores candidate paths using the configured additive scale.

    Args:
        scoring: Score constants. Defaults to ScoringConfig().
    """

    def __init__(self, scoring: ScoringConfig | None = None) -> None:
        self._scoring = scoring or ScoringConfig()

    @property
    def scoring(self) -> ScoringConfig:
        """Score constants in use."""
        return self._scoring

    def evaluate(self, path: str) -> Evaluation:
        """Evaluate a path. Never raises.

        Args:
            path: Candidate path string.

        Returns:
            Evaluation with score, facts and metadata.
        """
        result = Evaluation(path=path)

        if not isinstance(path, str) or ("/" not in path and "\\" not in path):
            result.score = self._scoring.invalid_path
            return result

        result.type = classify_path(path)

        try:
            st = os.stat(path)
        except PermissionError:
            logger.debug("Permission denied evaluating %s", path)
            result.exists = True
            result.score = self._scoring.inaccessible
            return result
        except (OSError, ValueError):
            return result

        result.exists = True
        result.is_accessible = True
        result.score = self._scoring.exists
        is_dir = stat.S_ISDIR(st.st_mode)
        result.metadata.stats = PathStats(
            size=st.st_size,
            mtime=_format_mtime(st.st_mtime),
            mode=st.st_mode,
            is_dir=is_dir,
        )

        if not is_dir:
            return result

        result.score += self._scoring.directory
        try:
            contents = sorted(os.listdir(path))
        except PermissionError:
            logger.debug("Permission denied listing %s", path)
            result.is_accessible = False
            result.score = self._scoring.inaccessible
            return result
        except OSError as e:
            logger.debug("Cannot list %s: %s", path, e)
            result.is_accessible = False
            return result

        result.metadata.contents = contents
        if any(has_icloud_marker(name) for name in contents):
            result.score += self._scoring.markers
            result.metadata.has_icloud_markers = True

        return result
