"""Windows discovery adapter.

Finds iCloud Drive on Windows in three passes:

1. Common locations: ``%USERPROFILE%\\iCloudDrive``,
   ``%USERPROFILE%\\iCloud Drive`` and the same names at the root of
   every mounted drive letter. A candidate is only accepted if its
   listing looks like a sync root.
2. Registry: ``reg query`` against the sync-root-manager key, then the
   Apple keys as fallbacks when no confident root was found yet.
3. Expansion: app-storage and Documents/Photos entries inside every
   confident root.
"""

import logging
import os
import re
import string
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from icloudy.core.config import IcloudyConfig
from icloudy.core.deadline import Deadline, is_expired
from icloudy.discovery.base import DiscoveryAdapter
from icloudy.discovery.evaluator import has_icloud_marker
from icloudy.discovery.identity import is_app_storage_name
from icloudy.discovery.registry import PathRegistry
from icloudy.models.path_info import PathSource, SourceKind
from icloudy.utils.shell import command_exists, probe_command

logger = logging.getLogger(__name__)

ROOT_DIR_NAMES: tuple[str, ...] = ("iCloudDrive", "iCloud Drive")
STANDARD_DIRS: tuple[str, ...] = ("Documents", "Photos")

PRIMARY_REGISTRY_KEY = (
    r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\Windows\CurrentVersion\Explorer\SyncRootManager"
)
FALLBACK_REGISTRY_KEYS: tuple[str, ...] = (
    r"HKEY_CURRENT_USER\Software\Apple Inc.\iCloud",
    r"HKEY_LOCAL_MACHINE\SOFTWARE\Apple Inc.\iCloud",
    r"HKEY_LOCAL_MACHINE\SOFTWARE\WOW6432Node\Apple Inc.\iCloud",
)

_VALUE_LINE_RE = re.compile(r"^\s*(?P<name>.*?)\s+(?P<type>REG_[A-Z0-9_]+)\s+(?P<value>.+?)\s*$")


@dataclass(frozen=True, slots=True)
class RegistryValue:
    """One value line of ``reg query`` output.

    Attributes:
        key: Full key path from the block header.
        name: Value name (``(Default)`` for the unnamed value).
        type: Registry type, e.g. ``REG_SZ``.
        value: Raw value text.
    """

    key: str
    name: str
    type: str
    value: str


def parse_registry_output(output: str) -> list[RegistryValue]:
    """Parse the text printed by ``reg query``.

    The output is a sequence of blocks separated by blank lines. Each
    block starts with an ``HKEY_...`` header followed by zero or more
    ``<name>    REG_<TYPE>    <value>`` lines.

    Args:
        output: Raw command output (CRLF or LF line endings).

    Returns:
        Values in output order. Lines that do not match are ignored.
    """
    values: list[RegistryValue] = []
    current_key = ""

    for line in output.splitlines():
        stripped = line.strip()
        if not stripped:
            current_key = ""
            continue
        if stripped.startswith("HKEY_"):
            current_key = stripped
            continue

        match = _VALUE_LINE_RE.match(line)
        if match is None:
            continue
        values.append(
            RegistryValue(
                key=current_key,
                name=match.group("name").strip(),
                type=match.group("type"),
                value=match.group("value"),
            )
        )

    return values


def extract_icloud_paths(values: Iterable[RegistryValue]) -> list[RegistryValue]:
    """Keep registry values that look like iCloud folder paths.

    A value qualifies when it contains ``:\\`` and mentions "icloud"
    (case-insensitive). Surrounding quotes are stripped.

    Args:
        values: Parsed registry values.

    Returns:
        Qualifying values with cleaned-up ``value`` text.
    """
    accepted: list[RegistryValue] = []
    for item in values:
        path = item.value.strip().strip('"')
        if ":\\" not in path or "icloud" not in path.lower():
            continue
        accepted.append(RegistryValue(key=item.key, name=item.name, type=item.type, value=path))
    return accepted


def _mounted_drives() -> list[str]:
    """Return mounted drive letters as ``X:`` strings."""
    return [f"{letter}:" for letter in string.ascii_uppercase if os.path.exists(f"{letter}:\\")]


class WindowsDiscoveryAdapter(DiscoveryAdapter):
    """Discovers iCloud Drive paths on Windows.

    Args:
        environ: Environment mapping used for USERPROFILE. Defaults to os.environ.
        drives: Callable returning mounted drive letters (``["C:", ...]``).
        config: Configuration; defaults to IcloudyConfig().
        registry: Optional long-lived registry.
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        drives: Callable[[], list[str]] = _mounted_drives,
        config: IcloudyConfig | None = None,
        registry: PathRegistry | None = None,
    ) -> None:
        super().__init__(config=config, registry=registry)
        self._environ = environ if environ is not None else os.environ
        self._drives = drives

    @property
    def platform(self) -> str:
        """Return the platform identifier."""
        return "win32"

    def is_available(self) -> bool:
        """Check if Windows probing can run (USERPROFILE set or reg available)."""
        return bool(self._environ.get("USERPROFILE")) or command_exists("reg")

    def _probe(self, registry: PathRegistry, deadline: Deadline | None) -> None:
        self._find_in_common_locations(registry, deadline)
        if not is_expired(deadline):
            self._find_in_registry(registry, deadline)
        if not is_expired(deadline):
            self._discover_children(registry, deadline)

    def candidate_locations(self) -> list[str]:
        """Return the fixed list of common root locations to check."""
        candidates: list[str] = []
        user_profile = self._environ.get("USERPROFILE")
        if user_profile:
            candidates.extend(os.path.join(user_profile, name) for name in ROOT_DIR_NAMES)
        else:
            logger.debug("USERPROFILE environment variable not found")

        for drive in self._drives():
            candidates.extend(f"{drive}\\{name}" for name in ROOT_DIR_NAMES)
        return candidates

    def _find_in_common_locations(self, registry: PathRegistry, deadline: Deadline | None) -> None:
        for candidate in self.candidate_locations():
            if is_expired(deadline):
                logger.warning("Discovery deadline reached during common-location probing")
                return
            if self._looks_like_drive_root(candidate):
                registry.add_path(candidate, PathSource(SourceKind.COMMON))

    @staticmethod
    def _looks_like_drive_root(path: str) -> bool:
        """Check a candidate is a directory whose listing looks like iCloud Drive."""
        try:
            if not os.path.isdir(path):
                return False
            contents = os.listdir(path)
        except (OSError, ValueError):
            return False

        return any(
            has_icloud_marker(name) or name in STANDARD_DIRS or is_app_storage_name(name)
            for name in contents
        )

    def _find_in_registry(self, registry: PathRegistry, deadline: Deadline | None) -> None:
        if not command_exists("reg"):
            logger.debug("reg.exe not available, skipping registry probing")
            return

        self._search_registry_key(registry, PRIMARY_REGISTRY_KEY, deadline)

        threshold = self._config.scoring.fallback_skip_score
        if any(info.score > threshold for info in registry.values()):
            logger.debug("Drive root already found, skipping fallback registry keys")
            return

        for key in FALLBACK_REGISTRY_KEYS:
            if is_expired(deadline):
                logger.warning("Discovery deadline reached during registry probing")
                return
            self._search_registry_key(registry, key, deadline)

    def _search_registry_key(
        self, registry: PathRegistry, key: str, deadline: Deadline | None
    ) -> None:
        result = probe_command(
            ["reg", "query", key, "/s", "/f", "icloud", "/d"],
            timeout=self._config.discovery.command_timeout_seconds,
            deadline=deadline,
        )
        if result is None:
            logger.debug("Registry key not found or empty: %s", key)
            return

        for item in extract_icloud_paths(parse_registry_output(result.stdout)):
            registry.add_path(
                item.value,
                PathSource(SourceKind.REGISTRY, {"reg_path": item.key, "value_name": item.name}),
            )

    def _discover_children(self, registry: PathRegistry, deadline: Deadline | None) -> None:
        scoring = self._config.scoring
        roots = [
            info
            for info in registry.values()
            if info.is_accessible and info.score >= scoring.root_min_score
        ]

        for root in roots:
            if is_expired(deadline):
                logger.warning("Discovery deadline reached during root expansion")
                return
            try:
                names = sorted(os.listdir(root.path))
            except OSError as e:
                logger.debug("Cannot scan root %s: %s", root.path, e)
                continue

            for name in names:
                child = os.path.join(root.path, name)
                if not os.path.isdir(child):
                    continue
                if is_app_storage_name(name):
                    registry.add_path(
                        child,
                        PathSource(SourceKind.APP_STORAGE, {"root_path": root.path}),
                        bonus=scoring.app_storage_root_bonus,
                    )
                elif name in STANDARD_DIRS:
                    registry.add_path(
                        child,
                        PathSource(SourceKind.COMMON_PATH, {"root_path": root.path}),
                    )
