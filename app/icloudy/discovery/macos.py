"""macOS discovery adapter.

Probes the iCloud Drive tree under ``~/Library/Mobile Documents``:
the ``com~apple~CloudDocs`` root, its standard Documents/Photos
folders and every app-storage sibling. Optionally also probes other
local accounts (listed with ``dscl``), the shared CloudDocs folder and
sandboxed container mirrors.
"""

import logging
import os
from pathlib import Path

from icloudy.core.config import IcloudyConfig
from icloudy.core.deadline import Deadline, is_expired
from icloudy.discovery.base import DiscoveryAdapter
from icloudy.discovery.identity import is_app_storage_name
from icloudy.discovery.registry import PathRegistry
from icloudy.models.path_info import PathSource, SourceKind
from icloudy.utils.shell import command_exists, probe_command

logger = logging.getLogger(__name__)

MOBILE_DOCUMENTS = Path("Library") / "Mobile Documents"
ICLOUD_ROOT_DIR = "com~apple~CloudDocs"
STANDARD_DIRS: tuple[str, ...] = ("Documents", "Photos")

_USERS_ROOT = Path("/Users")
_SHARED_CLOUD_DOCS = _USERS_ROOT / "Shared" / "CloudDocs"
_CONTAINER_MIRROR = Path("Data") / "Library" / "Mobile Documents"


class MacDiscoveryAdapter(DiscoveryAdapter):
    """Discovers iCloud Drive paths on macOS.

    Args:
        home: Home directory of the current user. Defaults to Path.home().
        users_root: Directory holding local account homes.
        shared_path: Shared CloudDocs location.
        config: Configuration; defaults to IcloudyConfig().
        registry: Optional long-lived registry.
    """

    def __init__(
        self,
        *,
        home: Path | None = None,
        users_root: Path = _USERS_ROOT,
        shared_path: Path = _SHARED_CLOUD_DOCS,
        config: IcloudyConfig | None = None,
        registry: PathRegistry | None = None,
    ) -> None:
        super().__init__(config=config, registry=registry)
        self._home = home or Path.home()
        self._users_root = users_root
        self._shared_path = shared_path

    @property
    def platform(self) -> str:
        """Return the platform identifier."""
        return "darwin"

    def is_available(self) -> bool:
        """Check if a Mobile Documents tree exists for the current user."""
        return os.path.isdir(self._home / MOBILE_DOCUMENTS)

    def _probe(self, registry: PathRegistry, deadline: Deadline | None) -> None:
        self._probe_home(registry, self._home, user=None)

        discovery = self._config.discovery
        if discovery.include_all_users and not is_expired(deadline):
            for user in self._list_users(deadline):
                if is_expired(deadline):
                    logger.warning("Discovery deadline reached, skipping remaining users")
                    break
                user_home = self._users_root / user
                if user_home == self._home:
                    continue
                if not os.path.isdir(user_home / MOBILE_DOCUMENTS):
                    continue
                self._probe_home(registry, user_home, user=user)

        if not is_expired(deadline) and os.path.isdir(self._shared_path):
            registry.add_path(
                str(self._shared_path),
                PathSource(SourceKind.SHARED, {"directory_type": "shared"}),
            )

        if discovery.include_containers and not is_expired(deadline):
            self._probe_containers(registry)

    def _probe_home(self, registry: PathRegistry, home: Path, user: str | None) -> None:
        """Probe one account's Mobile Documents tree.

        The current user (``user is None``) gets common/commonPath/appStorage
        sources; other accounts get userDirectory sources tagged with
        the account name.
        """
        mobile_docs = home / MOBILE_DOCUMENTS
        root = mobile_docs / ICLOUD_ROOT_DIR

        root_info = registry.add_path(str(root), self._source(SourceKind.COMMON, user, "root"))

        scoring = self._config.scoring
        if root_info.is_accessible and root_info.score >= scoring.root_min_score:
            for name in STANDARD_DIRS:
                standard = root / name
                if os.path.isdir(standard):
                    registry.add_path(
                        str(standard),
                        self._source(SourceKind.COMMON_PATH, user, name.lower()),
                    )

        try:
            entries = sorted(mobile_docs.iterdir())
        except PermissionError:
            logger.warning("Permission denied scanning directory: %s", mobile_docs)
            return
        except OSError as e:
            logger.debug("Cannot scan %s: %s", mobile_docs, e)
            return

        bonus = scoring.app_storage_root_bonus if root_info.is_accessible else 0
        for entry in entries:
            if entry.name == ICLOUD_ROOT_DIR or not is_app_storage_name(entry.name):
                continue
            if not os.path.isdir(entry):
                continue
            registry.add_path(
                str(entry),
                self._source(SourceKind.APP_STORAGE, user, "appStorage"),
                bonus=bonus,
            )

    def _probe_containers(self, registry: PathRegistry) -> None:
        """Probe sandboxed app containers for Mobile Documents mirrors."""
        containers = self._home / "Library" / "Containers"
        try:
            entries = sorted(containers.iterdir())
        except PermissionError:
            logger.warning("Permission denied scanning directory: %s", containers)
            return
        except OSError as e:
            logger.debug("Cannot scan %s: %s", containers, e)
            return

        for container in entries:
            mirror = container / _CONTAINER_MIRROR
            if not os.path.isdir(mirror):
                continue
            registry.add_path(
                str(mirror),
                PathSource(SourceKind.CONTAINER, {"container": container.name}),
            )

    def _list_users(self, deadline: Deadline | None) -> list[str]:
        """List local account names via the directory service.

        System accounts (leading underscore) are excluded. Returns an
        empty list if ``dscl`` is unavailable or fails.
        """
        if not command_exists("dscl"):
            return []

        result = probe_command(
            ["dscl", ".", "-list", "/Users"],
            timeout=self._config.discovery.command_timeout_seconds,
            deadline=deadline,
        )
        if result is None:
            return []

        return [name for name in result.lines if not name.startswith("_")]

    @staticmethod
    def _source(kind: SourceKind, user: str | None, directory_type: str) -> PathSource:
        if user is None:
            return PathSource(kind)
        return PathSource(
            SourceKind.USER_DIRECTORY,
            {"user": user, "directory_type": directory_type},
        )
