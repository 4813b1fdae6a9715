"""iCloud Drive path discovery.

This module exports the evaluator, identity parser, path registry,
platform adapters and the search filter.
"""

from icloudy.discovery.base import DiscoveryAdapter
from icloudy.discovery.evaluator import Evaluation, PathEvaluator, classify_path, has_icloud_marker
from icloudy.discovery.factory import UnsupportedPlatformError, get_adapter
from icloudy.discovery.identity import AppIdentity, format_app_name, parse_app_identity
from icloudy.discovery.macos import MacDiscoveryAdapter
from icloudy.discovery.mock import MockDiscoveryAdapter
from icloudy.discovery.registry import PathRegistry
from icloudy.discovery.search import PathFinder, filter_paths, find_matching_apps
from icloudy.discovery.windows import (
    RegistryValue,
    WindowsDiscoveryAdapter,
    parse_registry_output,
)

__all__ = [
    "AppIdentity",
    "DiscoveryAdapter",
    "Evaluation",
    "MacDiscoveryAdapter",
    "MockDiscoveryAdapter",
    "PathEvaluator",
    "PathFinder",
    "PathRegistry",
    "RegistryValue",
    "UnsupportedPlatformError",
    "WindowsDiscoveryAdapter",
    "classify_path",
    "filter_paths",
    "find_matching_apps",
    "format_app_name",
    "get_adapter",
    "has_icloud_marker",
    "parse_app_identity",
    "parse_registry_output",
]
