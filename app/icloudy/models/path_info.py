"""Discovery domain models.

This module defines the data structures produced by the discovery
adapters: candidate paths with their score, evaluation facts,
parsed application identity and provenance.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class SourceKind(str, Enum):
    """Discovery strategy that produced or reconfirmed a path.

    Attributes:
        COMMON: Well-known default location (macOS root, Windows profile folders).
        REGISTRY: Value read from the Windows registry.
        APP_STORAGE: App-storage sibling or child of a root.
        COMMON_PATH: Standard Documents/Photos folder under a root.
        USER_DIRECTORY: Another local account's Mobile Documents tree.
        CONTAINER: Sandboxed app container mirror.
        SHARED: Shared CloudDocs folder.
        MOCK: Injected by tests or callers.
    """

    COMMON = "common"
    REGISTRY = "registry"
    APP_STORAGE = "appStorage"
    COMMON_PATH = "commonPath"
    USER_DIRECTORY = "userDirectory"
    CONTAINER = "container"
    SHARED = "shared"
    MOCK = "mock"


class PathType(str, Enum):
    """Category of a discovered path."""

    ROOT = "root"
    APP_STORAGE = "app_storage"
    PHOTOS = "photos"
    DOCUMENTS = "documents"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class PathSource:
    """Provenance descriptor for a discovered path.

    Attributes:
        kind: Strategy that produced the path.
        params: Strategy-specific parameters (registry key, user, container, ...).
    """

    kind: SourceKind
    params: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"source": self.kind.value, **self.params}


@dataclass(frozen=True, slots=True)
class PathStats:
    """Snapshot of stat() results for a path.

    Attributes:
        size: Size in bytes.
        mtime: Last modification time in ISO 8601 format.
        mode: Raw st_mode bits.
        is_dir: Whether the path is a directory.
    """

    size: int
    mtime: str
    mode: int
    is_dir: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "size": self.size,
            "mtime": self.mtime,
            "mode": self.mode,
            "is_dir": self.is_dir,
        }


@dataclass(slots=True)
class PathMetadata:
    """Open metadata attached to a discovered path.

    Attributes:
        stats: stat() snapshot, None when the path could not be stat'ed.
        contents: Directory listing at evaluation time.
        has_icloud_markers: Listing contained iCloud marker entries.
        app_id: Original app-storage directory name.
        app_name: Human-readable application name.
        bundle_id: Dot-delimited bundle identifier.
        vendor: Publisher prefix of the bundle identifier.
        source: Most relevant provenance for the current score.
        sources: Full provenance history, in discovery order.
        extra: Free-form additional fields.
    """

    stats: PathStats | None = None
    contents: list[str] | None = None
    has_icloud_markers: bool = False
    app_id: str | None = None
    app_name: str | None = None
    bundle_id: str | None = None
    vendor: str | None = None
    source: PathSource | None = None
    sources: list[PathSource] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def merged_with(self, newer: "PathMetadata") -> "PathMetadata":
        """Overlay ``newer`` onto this metadata.

        Fields that are None (or empty) in ``newer`` keep their current
        value. ``sources`` is not merged here; the registry owns it.

        Args:
            newer: Metadata from a better-scoring evaluation.

        Returns:
            New PathMetadata instance.
        """
        merged = PathMetadata()
        for f in fields(PathMetadata):
            if f.name in ("sources", "extra"):
                continue
            new_value = getattr(newer, f.name)
            keep_old = new_value is None or (f.name == "has_icloud_markers" and not new_value)
            setattr(merged, f.name, getattr(self, f.name) if keep_old else new_value)
        merged.sources = list(self.sources)
        merged.extra = {**self.extra, **newer.extra}
        return merged

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "stats": self.stats.to_dict() if self.stats else None,
            "contents": self.contents,
            "has_icloud_markers": self.has_icloud_markers,
            "app_id": self.app_id,
            "app_name": self.app_name,
            "bundle_id": self.bundle_id,
            "vendor": self.vendor,
            "source": self.source.to_dict() if self.source else None,
            "sources": [s.to_dict() for s in self.sources],
            **self.extra,
        }


@dataclass(slots=True)
class PathInfo:
    """A discovered candidate location.

    Instances are created the first time a path is probed and are only
    mutated by the registry merge step.

    Attributes:
        path: Canonical filesystem path string.
        score: Confidence that this is a real iCloud-managed location.
        exists: Path could be stat'ed (or exists but is locked).
        is_accessible: Path could be stat'ed and listed.
        type: Path category.
        metadata: Evaluation facts, identity and provenance.
    """

    path: str
    score: int
    exists: bool
    is_accessible: bool
    type: PathType = PathType.OTHER
    metadata: PathMetadata = field(default_factory=PathMetadata)

    def __post_init__(self) -> None:
        """Validate path info after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": self.path,
            "score": self.score,
            "exists": self.exists,
            "is_accessible": self.is_accessible,
            "type": self.type.value,
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Filter options applied to discovered paths.

    Attributes:
        app_name: Fuzzy application name pattern.
        min_score: Drop paths scoring below this value.
        include_inaccessible: Keep paths that could not be listed.
        types: Keep only these categories (None means all).
    """

    app_name: str | None = None
    min_score: int | None = None
    include_inaccessible: bool = False
    types: tuple[PathType, ...] | None = None
