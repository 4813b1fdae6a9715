"""Abstract base class for discovery adapters.

This module defines the DiscoveryAdapter interface that every
platform-specific probing strategy implements.
"""

import logging
from abc import ABC, abstractmethod

from icloudy.core.config import IcloudyConfig
from icloudy.core.deadline import Deadline
from icloudy.discovery.evaluator import PathEvaluator
from icloudy.discovery.registry import PathRegistry
from icloudy.models.path_info import PathInfo

logger = logging.getLogger(__name__)


class DiscoveryAdapter(ABC):
    """Abstract base class for all discovery adapters.

    Adapters probe the host for iCloud Drive roots and app-storage
    folders and feed every candidate through a PathRegistry.
    ``find_paths`` never raises: probe failures only shrink the result.

    By default each ``find_paths`` call starts from an empty registry.
    Passing a registry to the constructor makes results accumulate
    across calls under the same merge rules.

    Example:
        >>> adapter = MacDiscoveryAdapter()
        >>> for info in adapter.find_paths():
        ...     print(f"{info.path}: {info.score}")

    Args:
        config: Configuration; defaults to IcloudyConfig().
        registry: Optional long-lived registry.
    """

    def __init__(
        self,
        *,
        config: IcloudyConfig | None = None,
        registry: PathRegistry | None = None,
    ) -> None:
        self._config = config or IcloudyConfig()
        self._shared_registry = registry

    @property
    @abstractmethod
    def platform(self) -> str:
        """Return the platform identifier this adapter handles."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter can probe the current host."""

    @abstractmethod
    def _probe(self, registry: PathRegistry, deadline: Deadline | None) -> None:
        """Run every probe of this strategy, feeding ``registry``."""

    def find_paths(self, deadline: Deadline | None = None) -> list[PathInfo]:
        """Discover candidate paths.

        Args:
            deadline: Stop issuing new probes once this expires.

        Returns:
            Entries sorted by descending score, non-positive scores dropped.
        """
        registry = self._registry()
        self._probe(registry, deadline)
        return registry.ranked()

    def _registry(self) -> PathRegistry:
        if self._shared_registry is not None:
            return self._shared_registry
        return PathRegistry(PathEvaluator(self._config.scoring))
