"""Platform-agnostic discovery adapter returning injected paths.

Useful in tests and for callers that already know their candidate
locations. No filesystem access happens unless ``add_mock_path`` is
asked to evaluate a real path.
"""

from icloudy.core.config import IcloudyConfig
from icloudy.core.deadline import Deadline
from icloudy.discovery.base import DiscoveryAdapter
from icloudy.discovery.evaluator import PathEvaluator
from icloudy.discovery.registry import PathRegistry
from icloudy.models.path_info import PathInfo, PathSource, SourceKind


class MockDiscoveryAdapter(DiscoveryAdapter):
    """Discovery adapter seeded with fixed PathInfo values.

    Args:
        paths: Initial entries.
        config: Configuration; defaults to IcloudyConfig().
        registry: Optional long-lived registry.
    """

    def __init__(
        self,
        paths: list[PathInfo] | None = None,
        *,
        config: IcloudyConfig | None = None,
        registry: PathRegistry | None = None,
    ) -> None:
        super().__init__(config=config, registry=registry)
        self._mock_registry = PathRegistry(PathEvaluator(self._config.scoring))
        for info in paths or []:
            self._mock_registry.add(info)

    @property
    def platform(self) -> str:
        """Return the platform identifier."""
        return "mock"

    def is_available(self) -> bool:
        """Always available."""
        return True

    def set_mock_paths(self, paths: list[PathInfo]) -> None:
        """Replace all entries."""
        self._mock_registry.clear()
        for info in paths:
            self._mock_registry.add(info)

    def add_mock_path(
        self,
        path: str,
        *,
        score: int = 100,
        is_accessible: bool = True,
        **metadata: str,
    ) -> PathInfo:
        """Evaluate ``path`` and then force its score and accessibility.

        Keyword arguments matching PathMetadata identity fields
        (``app_name``, ``bundle_id``, ...) override parsed values.
        """
        info = self._mock_registry.add_path(path, PathSource(SourceKind.MOCK))
        info.score = score
        info.is_accessible = is_accessible
        for name, value in metadata.items():
            setattr(info.metadata, name, value)
        return info

    def _probe(self, registry: PathRegistry, deadline: Deadline | None) -> None:
        for info in self._mock_registry.values():
            registry.merge(info)
