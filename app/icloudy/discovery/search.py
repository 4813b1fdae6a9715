"""Filtering and fuzzy application matching for discovered paths.

``filter_paths`` applies accessibility, score and category filters.
When an application name pattern is given, the survivors are ranked by
match score instead of discovery score.
"""

from icloudy.core.deadline import Deadline
from icloudy.discovery.base import DiscoveryAdapter
from icloudy.models.path_info import PathInfo, SearchOptions

# Match weights per pattern token
EXACT_NAME_WEIGHT = 100
PARTIAL_NAME_WEIGHT = 50
BUNDLE_ID_WEIGHT = 30
APP_ID_WEIGHT = 20


def calculate_match_score(terms: list[str], info: PathInfo) -> int:
    """Score how well a path's app identity matches the search terms.

    For each term: exact (case-insensitive) app name match scores 100,
    otherwise an app name substring scores 50; a bundle ID substring
    adds 30 and an app ID substring adds 20.

    Args:
        terms: Lowercased pattern tokens.
        info: Candidate path.

    Returns:
        Summed match score; 0 means no match.
    """
    metadata = info.metadata
    name = (metadata.app_name or "").lower()
    bundle_id = (metadata.bundle_id or "").lower()
    app_id = (metadata.app_id or "").lower()

    score = 0
    for term in terms:
        if name and name == term:
            score += EXACT_NAME_WEIGHT
        elif term in name:
            score += PARTIAL_NAME_WEIGHT
        if term in bundle_id:
            score += BUNDLE_ID_WEIGHT
        if term in app_id:
            score += APP_ID_WEIGHT
    return score


def find_matching_apps(pattern: str, paths: list[PathInfo]) -> list[PathInfo]:
    """Rank paths by fuzzy match against an app name pattern.

    Args:
        pattern: Whitespace-separated search terms.
        paths: Candidate paths.

    Returns:
        Matching paths sorted by descending match score; non-matches dropped.
    """
    terms = pattern.lower().split()
    if not terms:
        return list(paths)

    scored = [(calculate_match_score(terms, info), info) for info in paths]
    scored = [item for item in scored if item[0] > 0]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [info for _, info in scored]


def filter_paths(paths: list[PathInfo], options: SearchOptions) -> list[PathInfo]:
    """Apply search options to discovered paths.

    Args:
        paths: Discovered paths, usually sorted by score.
        options: Filter options.

    Returns:
        Filtered paths. Order is preserved unless ``options.app_name`` is
        set, in which case results are ordered by match score.
    """
    filtered: list[PathInfo] = []
    for info in paths:
        if not options.include_inaccessible and not info.is_accessible:
            continue
        if options.min_score is not None and info.score < options.min_score:
            continue
        if options.types is not None and info.type not in options.types:
            continue
        filtered.append(info)

    if options.app_name:
        return find_matching_apps(options.app_name, filtered)
    return filtered


class PathFinder:
    """Discovery plus filtering behind one call.

    Construct one per use (or share one explicitly); there is no global
    instance.

    Args:
        adapter: Discovery adapter to query.
    """

    def __init__(self, adapter: DiscoveryAdapter) -> None:
        self._adapter = adapter

    @property
    def adapter(self) -> DiscoveryAdapter:
        """Underlying discovery adapter."""
        return self._adapter

    def find(
        self,
        options: SearchOptions | None = None,
        *,
        deadline: Deadline | None = None,
    ) -> list[PathInfo]:
        """Discover and filter paths.

        Args:
            options: Filter options; defaults to SearchOptions().
            deadline: Forwarded to the adapter.

        Returns:
            Filtered paths.
        """
        paths = self._adapter.find_paths(deadline=deadline)
        return filter_paths(paths, options or SearchOptions())
