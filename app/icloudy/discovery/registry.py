"""Deduplicating path registry.

Holds at most one PathInfo per canonical path string. Every discovery
probe feeds its candidates through ``add_path``; repeated discoveries
of the same path are merged instead of duplicated.
"""

import copy
import logging
from collections.abc import Iterator

from icloudy.discovery.evaluator import PathEvaluator, path_basename
from icloudy.discovery.identity import is_app_storage_name, parse_app_identity
from icloudy.models.path_info import PathInfo, PathMetadata, PathSource

logger = logging.getLogger(__name__)


class PathRegistry:
    """Map from path string to best-known PathInfo.

    Merge rules for a path that is already registered:

    - New evaluation scores higher: score, facts and metadata are
      replaced (fields the new evaluation leaves unset are kept) and
      the source is appended to the history.
    - New evaluation scores equal or lower: the entry is untouched
      except that the source is appended to the history.

    Merging is a plain in-memory update with no I/O, so a single
    discovery run is always the only writer.

    Args:
        evaluator: Evaluator used to score new candidates.
    """

    def __init__(self, evaluator: PathEvaluator | None = None) -> None:
        self._evaluator = evaluator or PathEvaluator()
        self._paths: dict[str, PathInfo] = {}

    @property
    def evaluator(self) -> PathEvaluator:
        """Evaluator used for new candidates."""
        return self._evaluator

    def add_path(self, path: str, source: PathSource, *, bonus: int = 0) -> PathInfo:
        """Evaluate a candidate path and merge it into the registry.

        Args:
            path: Candidate path string.
            source: Provenance of this discovery.
            bonus: Policy adjustment added to the evaluated score.

        Returns:
            The registry entry for ``path`` after merging.
        """
        evaluation = self._evaluator.evaluate(path)
        metadata = self._enrich_metadata(evaluation.metadata, path, source)
        metadata.sources = [source]
        candidate = PathInfo(
            path=path,
            score=evaluation.score + bonus if evaluation.exists else evaluation.score,
            exists=evaluation.exists,
            is_accessible=evaluation.is_accessible,
            type=evaluation.type,
            metadata=metadata,
        )

        existing = self._paths.get(path)
        if existing is None:
            self._paths[path] = candidate
            logger.debug(
                "Registered %s (score=%d, source=%s)", path, candidate.score, source.kind.value
            )
            return candidate
        return self._merge_into(existing, candidate)

    def merge(self, info: PathInfo) -> PathInfo:
        """Merge a pre-built entry under the same rules as ``add_path``.

        The registry keeps a copy, so later merges never modify ``info``.

        Returns:
            The registry entry for ``info.path`` after merging.
        """
        candidate = copy.deepcopy(info)
        if candidate.metadata.source is not None and not candidate.metadata.sources:
            candidate.metadata.sources = [candidate.metadata.source]

        existing = self._paths.get(candidate.path)
        if existing is None:
            self._paths[candidate.path] = candidate
            return candidate
        return self._merge_into(existing, candidate)

    def add(self, info: PathInfo) -> None:
        """Insert a pre-built entry, replacing any existing one."""
        if info.metadata.source is not None and not info.metadata.sources:
            info.metadata.sources = [info.metadata.source]
        self._paths[info.path] = info

    def get(self, path: str) -> PathInfo | None:
        """Return the entry for ``path``, if registered."""
        return self._paths.get(path)

    def values(self) -> list[PathInfo]:
        """Return all current entries in insertion order."""
        return list(self._paths.values())

    def ranked(self) -> list[PathInfo]:
        """Return entries sorted by descending score, non-positive scores dropped."""
        return sorted(
            (info for info in self._paths.values() if info.score > 0),
            key=lambda info: info.score,
            reverse=True,
        )

    def clear(self) -> None:
        """Drop all entries."""
        self._paths.clear()

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[PathInfo]:
        return iter(self.values())

    @staticmethod
    def _merge_into(existing: PathInfo, candidate: PathInfo) -> PathInfo:
        if candidate.score > existing.score:
            logger.debug("Upgrading %s: %d -> %d", existing.path, existing.score, candidate.score)
            existing.score = candidate.score
            existing.exists = candidate.exists
            existing.is_accessible = candidate.is_accessible
            existing.type = candidate.type
            existing.metadata = existing.metadata.merged_with(candidate.metadata)

        existing.metadata.sources.extend(candidate.metadata.sources)
        return existing

    @staticmethod
    def _enrich_metadata(metadata: PathMetadata, path: str, source: PathSource) -> PathMetadata:
        """Attach provenance and, for app-storage names, parsed identity."""
        metadata.source = source

        basename = path_basename(path)
        if is_app_storage_name(basename):
            identity = parse_app_identity(basename)
            if not identity.is_empty:
                metadata.app_id = identity.app_id
                metadata.app_name = identity.app_name
                metadata.bundle_id = identity.bundle_id
                metadata.vendor = identity.vendor

        return metadata
