"""Discovery adapter selection."""

import sys
from typing import Any

from icloudy.discovery.base import DiscoveryAdapter
from icloudy.discovery.macos import MacDiscoveryAdapter
from icloudy.discovery.mock import MockDiscoveryAdapter
from icloudy.discovery.windows import WindowsDiscoveryAdapter

SUPPORTED_PLATFORMS: tuple[str, ...] = ("darwin", "win32", "mock")


class UnsupportedPlatformError(RuntimeError):
    """Raised when no discovery adapter exists for a platform."""

    def __init__(self, platform: str) -> None:
        super().__init__(f"Unsupported platform: {platform}")
        self.platform = platform


def get_adapter(platform: str | None = None, **kwargs: Any) -> DiscoveryAdapter:
    """Get the discovery adapter for a platform.

    Args:
        platform: Platform identifier (``darwin``, ``win32`` or ``mock``).
            Defaults to sys.platform.
        **kwargs: Passed to the adapter constructor.

    Returns:
        A new DiscoveryAdapter instance.

    Raises:
        UnsupportedPlatformError: If the platform has no adapter.
    """
    name = platform or sys.platform

    if name == "darwin":
        return MacDiscoveryAdapter(**kwargs)
    if name == "win32":
        return WindowsDiscoveryAdapter(**kwargs)
    if name == "mock":
        return MockDiscoveryAdapter(**kwargs)

    raise UnsupportedPlatformError(name)
