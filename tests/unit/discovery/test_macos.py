"""Unit tests for the macOS discovery adapter."""

import logging
import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from icloudy.core.config import DiscoveryConfig, IcloudyConfig
from icloudy.core.deadline import Deadline
from icloudy.discovery.macos import MOBILE_DOCUMENTS, MacDiscoveryAdapter
from icloudy.models.path_info import PathType, SourceKind
from icloudy.utils.shell import CommandResult


def _local_only() -> IcloudyConfig:
    return IcloudyConfig(
        discovery=DiscoveryConfig(include_all_users=False, include_containers=False)
    )


def _adapter(
    home: Path, tmp_path: Path, config: IcloudyConfig | None = None
) -> MacDiscoveryAdapter:
    return MacDiscoveryAdapter(
        home=home,
        users_root=tmp_path / "Users",
        shared_path=tmp_path / "Users" / "Shared" / "CloudDocs",
        config=config or _local_only(),
    )


class TestMacDiscoveryAdapter:
    """Tests for MacDiscoveryAdapter class."""

    def test_platform(self, tmp_path: Path) -> None:
        """Adapter reports darwin."""
        assert _adapter(tmp_path, tmp_path).platform == "darwin"

    def test_is_available(self, mobile_documents: Path, tmp_path: Path) -> None:
        """Available iff the Mobile Documents directory exists."""
        assert _adapter(mobile_documents, tmp_path).is_available() is True
        assert _adapter(tmp_path / "nobody", tmp_path).is_available() is False

    def test_finds_root_standard_dirs_and_app_storage(
        self, mobile_documents: Path, tmp_path: Path
    ) -> None:
        """Root, Documents, Photos and every app-storage sibling are found."""
        paths = _adapter(mobile_documents, tmp_path).find_paths()
        by_name = {Path(info.path).name: info for info in paths}

        assert set(by_name) == {
            "com~apple~CloudDocs",
            "Documents",
            "Photos",
            "iCloud~com~apple~notes",
            "4R6749AYRE~com~pixelmatorteam~pixelmator",
            "dk~simonbs~Scriptable",
        }

        root = by_name["com~apple~CloudDocs"]
        assert root.type == PathType.ROOT
        assert root.score == 28
        assert root.metadata.has_icloud_markers is True
        assert root.metadata.source is not None
        assert root.metadata.source.kind == SourceKind.COMMON

        notes = by_name["iCloud~com~apple~notes"]
        assert notes.type == PathType.APP_STORAGE
        assert notes.metadata.app_name == "Notes"
        assert notes.metadata.source is not None
        assert notes.metadata.source.kind == SourceKind.APP_STORAGE

        assert by_name["Documents"].type == PathType.DOCUMENTS
        assert by_name["Photos"].type == PathType.PHOTOS

    def test_results_are_ranked(self, mobile_documents: Path, tmp_path: Path) -> None:
        """The marker-bearing root ranks first."""
        paths = _adapter(mobile_documents, tmp_path).find_paths()

        assert paths[0].path.endswith("com~apple~CloudDocs")
        assert [p.score for p in paths] == sorted((p.score for p in paths), reverse=True)

    def test_app_storage_bonus(self, mobile_documents: Path, tmp_path: Path) -> None:
        """The configured bonus is added to app storage when the root is accessible."""
        config = _local_only()
        config.scoring.app_storage_root_bonus = 5

        paths = _adapter(mobile_documents, tmp_path, config).find_paths()
        scriptable = next(p for p in paths if p.path.endswith("dk~simonbs~Scriptable"))

        assert scriptable.score == 18

    def test_missing_tree_returns_empty(self, tmp_path: Path) -> None:
        """A home without Mobile Documents yields no results and no error."""
        assert _adapter(tmp_path / "empty", tmp_path).find_paths() == []

    def test_no_standard_dirs_when_root_missing(self, tmp_path: Path) -> None:
        """Standard folders are only probed under a confident root."""
        home = tmp_path / "home"
        docs = home / MOBILE_DOCUMENTS
        (docs / "iCloud~com~apple~notes").mkdir(parents=True)

        paths = _adapter(home, tmp_path).find_paths()

        assert [Path(p.path).name for p in paths] == ["iCloud~com~apple~notes"]

    def test_shared_clouddocs(self, mobile_documents: Path, tmp_path: Path) -> None:
        """The shared CloudDocs folder is recorded with a shared source."""
        shared = tmp_path / "Users" / "Shared" / "CloudDocs"
        shared.mkdir(parents=True)

        paths = _adapter(mobile_documents, tmp_path).find_paths()
        entry = next(p for p in paths if p.path == str(shared))

        assert entry.metadata.source is not None
        assert entry.metadata.source.kind == SourceKind.SHARED

    def test_containers(self, mobile_documents: Path, tmp_path: Path) -> None:
        """Sandboxed container mirrors are probed when enabled."""
        mirror = (
            mobile_documents
            / "Library"
            / "Containers"
            / "com.example.editor"
            / "Data"
            / "Library"
            / "Mobile Documents"
        )
        mirror.mkdir(parents=True)
        config = IcloudyConfig(discovery=DiscoveryConfig(include_all_users=False))

        paths = _adapter(mobile_documents, tmp_path, config).find_paths()
        entry = next(p for p in paths if p.path == str(mirror))

        assert entry.metadata.source is not None
        assert entry.metadata.source.params == {"container": "com.example.editor"}

    def test_expired_deadline_skips_optional_probes(
        self, mobile_documents: Path, tmp_path: Path
    ) -> None:
        """An expired deadline still returns the current user's results."""
        config = IcloudyConfig()
        with patch("icloudy.utils.shell.run_command") as mock_run:
            paths = _adapter(mobile_documents, tmp_path, config).find_paths(
                deadline=Deadline.after(-1)
            )

        mock_run.assert_not_called()
        assert paths


class TestOtherUsers:
    """Tests for multi-account probing."""

    @patch("icloudy.discovery.macos.command_exists", return_value=True)
    @patch("icloudy.utils.shell.run_command")
    def test_probes_other_accounts(
        self,
        mock_run: MagicMock,
        mock_exists: MagicMock,
        mobile_documents: Path,
        tmp_path: Path,
        mock_dscl_output: str,
    ) -> None:
        """Accounts listed by dscl with a Mobile Documents tree are probed."""
        mock_run.return_value = CommandResult(stdout=mock_dscl_output, stderr="", returncode=0)
        bob_root = tmp_path / "Users" / "bob" / MOBILE_DOCUMENTS / "com~apple~CloudDocs"
        bob_root.mkdir(parents=True)
        config = IcloudyConfig(discovery=DiscoveryConfig(include_containers=False))

        paths = _adapter(mobile_documents, tmp_path, config).find_paths()
        entry = next(p for p in paths if p.path == str(bob_root))

        assert entry.metadata.source is not None
        assert entry.metadata.source.kind == SourceKind.USER_DIRECTORY
        assert entry.metadata.source.params == {"user": "bob", "directory_type": "root"}
        assert mock_run.call_args.args[0] == ["dscl", ".", "-list", "/Users"]

    @patch("icloudy.discovery.macos.command_exists", return_value=True)
    @patch("icloudy.utils.shell.run_command")
    def test_system_accounts_are_skipped(
        self, mock_run: MagicMock, mock_exists: MagicMock, tmp_path: Path, mock_dscl_output: str
    ) -> None:
        """Underscore accounts are filtered out of the user list."""
        mock_run.return_value = CommandResult(stdout=mock_dscl_output, stderr="", returncode=0)

        users = _adapter(tmp_path, tmp_path, IcloudyConfig())._list_users(None)

        assert users == ["daemon", "nobody", "root", "alice", "bob"]

    @patch("icloudy.discovery.macos.command_exists", return_value=True)
    @patch(
        "icloudy.utils.shell.run_command",
        side_effect=subprocess.TimeoutExpired(cmd="dscl", timeout=10),
    )
    def test_dscl_timeout_is_absorbed(
        self, mock_run: MagicMock, mock_exists: MagicMock, mobile_documents: Path, tmp_path: Path
    ) -> None:
        """A hanging directory service does not break discovery."""
        paths = _adapter(mobile_documents, tmp_path, IcloudyConfig()).find_paths()

        assert paths

    @patch("icloudy.discovery.macos.command_exists", return_value=False)
    def test_no_dscl(self, mock_exists: MagicMock, tmp_path: Path) -> None:
        """Without dscl the user list is empty."""
        assert _adapter(tmp_path, tmp_path, IcloudyConfig())._list_users(None) == []


def _deny_iterdir(locked: Path) -> Callable[[Path], Iterator[Path]]:
    """Path.iterdir replacement that raises PermissionError for ``locked``."""
    real_iterdir = Path.iterdir

    def iterdir(self: Path) -> Iterator[Path]:
        if self == locked:
            raise PermissionError(13, "Permission denied", str(self))
        return real_iterdir(self)

    return iterdir


class TestUnreadableDirectories:
    """Tests for probes that hit unlistable directories."""

    @patch("icloudy.discovery.macos.command_exists", return_value=True)
    @patch("icloudy.utils.shell.run_command")
    def test_locked_user_tree_is_skipped(
        self,
        mock_run: MagicMock,
        mock_exists: MagicMock,
        mobile_documents: Path,
        tmp_path: Path,
        mock_dscl_output: str,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """An account whose Mobile Documents cannot be listed does not stop discovery."""
        mock_run.return_value = CommandResult(stdout=mock_dscl_output, stderr="", returncode=0)
        bob_docs = tmp_path / "Users" / "bob" / MOBILE_DOCUMENTS
        (bob_docs / "iCloud~com~apple~pages").mkdir(parents=True)
        alice_app = tmp_path / "Users" / "alice" / MOBILE_DOCUMENTS / "iCloud~com~apple~keynote"
        alice_app.mkdir(parents=True)
        shared = tmp_path / "Users" / "Shared" / "CloudDocs"
        shared.mkdir(parents=True)
        config = IcloudyConfig(discovery=DiscoveryConfig(include_containers=False))

        with (
            patch.object(Path, "iterdir", _deny_iterdir(bob_docs)),
            caplog.at_level(logging.WARNING, logger="icloudy.discovery.macos"),
        ):
            paths = _adapter(mobile_documents, tmp_path, config).find_paths()
        found = {p.path for p in paths}

        assert str(bob_docs / "iCloud~com~apple~pages") not in found
        assert str(alice_app) in found
        assert str(shared) in found
        assert str(mobile_documents / MOBILE_DOCUMENTS / "dk~simonbs~Scriptable") in found
        assert "Permission denied scanning directory" in caplog.text

    def test_locked_containers_directory_is_skipped(
        self, mobile_documents: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An unlistable Containers directory leaves the other results intact."""
        containers = mobile_documents / "Library" / "Containers"
        (containers / "com.example.editor" / "Data" / "Library" / "Mobile Documents").mkdir(
            parents=True
        )
        shared = tmp_path / "Users" / "Shared" / "CloudDocs"
        shared.mkdir(parents=True)
        config = IcloudyConfig(discovery=DiscoveryConfig(include_all_users=False))

        with (
            patch.object(Path, "iterdir", _deny_iterdir(containers)),
            caplog.at_level(logging.WARNING, logger="icloudy.discovery.macos"),
        ):
            paths = _adapter(mobile_documents, tmp_path, config).find_paths()
        found = {p.path for p in paths}

        assert not any("Containers" in path for path in found)
        assert str(shared) in found
        assert paths[0].path.endswith("com~apple~CloudDocs")
        assert "Permission denied scanning directory" in caplog.text
