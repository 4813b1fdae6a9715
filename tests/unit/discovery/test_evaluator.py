"""Unit tests for the path evaluator.

Tests for scoring, classification and marker detection.
"""

import os
import stat
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from icloudy.core.config import ScoringConfig
from icloudy.discovery.evaluator import (
    PathEvaluator,
    classify_path,
    has_icloud_marker,
    path_basename,
)
from icloudy.models.path_info import PathType


class TestHasIcloudMarker:
    """Tests for has_icloud_marker function."""

    @pytest.mark.parametrize(
        "name",
        ["iCloud~com~apple~notes", "ABC~com~vendor~app", "photo.jpg.icloud", "desktop.ini"],
    )
    def test_markers(self, name: str) -> None:
        """Known marker names are detected."""
        assert has_icloud_marker(name) is True

    @pytest.mark.parametrize("name", ["Documents", "notes.txt", "dk~simonbs~Scriptable"])
    def test_non_markers(self, name: str) -> None:
        """Ordinary names are not markers."""
        assert has_icloud_marker(name) is False


class TestClassifyPath:
    """Tests for classify_path function."""

    def test_macos_root(self) -> None:
        """The CloudDocs container is a root."""
        path = "/Users/alice/Library/Mobile Documents/com~apple~CloudDocs"
        assert classify_path(path) == PathType.ROOT

    def test_windows_root(self) -> None:
        """Windows drive folders are roots."""
        assert classify_path("C:\\Users\\alice\\iCloudDrive") == PathType.ROOT
        assert classify_path("D:\\iCloud Drive") == PathType.ROOT

    def test_app_storage(self) -> None:
        """Tilde-separated names are app storage."""
        assert classify_path("/x/iCloud~com~apple~notes") == PathType.APP_STORAGE

    def test_photos_and_documents(self) -> None:
        """Standard folders are classified by name."""
        assert classify_path("/x/com~apple~CloudDocs/Photos") == PathType.PHOTOS
        assert classify_path("C:\\iCloudDrive\\Documents") == PathType.DOCUMENTS

    def test_other(self) -> None:
        """Anything else is other."""
        assert classify_path("/tmp/random") == PathType.OTHER

    def test_trailing_separator(self) -> None:
        """Trailing separators do not hide the basename."""
        assert path_basename("/x/com~apple~CloudDocs/") == "com~apple~CloudDocs"


class TestPathEvaluator:
    """Tests for PathEvaluator class."""

    def test_missing_path_scores_zero(self, tmp_path: Path) -> None:
        """A nonexistent path scores 0 and is neither existing nor accessible."""
        result = PathEvaluator().evaluate(str(tmp_path / "missing"))

        assert result.score == 0
        assert result.exists is False
        assert result.is_accessible is False

    def test_file_scores_exists_only(self, tmp_path: Path) -> None:
        """A regular file earns only the exists credit."""
        file_path = tmp_path / "file.txt"
        file_path.write_text("data")

        result = PathEvaluator().evaluate(str(file_path))

        assert result.score == 8
        assert result.metadata.stats is not None
        assert result.metadata.stats.is_dir is False
        assert result.metadata.stats.size == 4

    def test_empty_directory(self, tmp_path: Path) -> None:
        """A directory earns exists plus directory credit."""
        result = PathEvaluator().evaluate(str(tmp_path))

        assert result.score == 13
        assert result.is_accessible is True
        assert result.metadata.contents == []
        assert result.metadata.has_icloud_markers is False

    def test_directory_with_markers(self, tmp_path: Path) -> None:
        """Marker entries in the listing add the marker credit."""
        (tmp_path / "iCloud~com~apple~notes").mkdir()
        (tmp_path / "plain").mkdir()

        result = PathEvaluator().evaluate(str(tmp_path))

        assert result.score == 28
        assert result.metadata.has_icloud_markers is True
        assert result.metadata.contents == ["iCloud~com~apple~notes", "plain"]

    def test_custom_scoring(self, tmp_path: Path) -> None:
        """Score constants come from ScoringConfig."""
        evaluator = PathEvaluator(ScoringConfig(exists=1, directory=2, markers=4))
        (tmp_path / "desktop.ini").write_text("")

        assert evaluator.evaluate(str(tmp_path)).score == 7

    def test_permission_denied_on_stat(self, tmp_path: Path) -> None:
        """A locked path exists but is inaccessible with a small positive score."""
        with patch("icloudy.discovery.evaluator.os.stat", side_effect=PermissionError):
            result = PathEvaluator().evaluate(str(tmp_path))

        assert result.exists is True
        assert result.is_accessible is False
        assert result.score == 2

    def test_permission_denied_on_listing(self, tmp_path: Path) -> None:
        """A directory that cannot be listed gets only the inaccessible credit."""
        with patch("icloudy.discovery.evaluator.os.listdir", side_effect=PermissionError):
            result = PathEvaluator().evaluate(str(tmp_path))

        assert result.exists is True
        assert result.is_accessible is False
        assert result.score == 2
        assert result.score < ScoringConfig().root_min_score
        assert result.metadata.contents is None

    @pytest.mark.parametrize("mtime", [10**13, -(10**13), float("inf")])
    def test_unrepresentable_mtime(self, tmp_path: Path, mtime: float) -> None:
        """An mtime datetime cannot represent is blanked instead of raising."""
        fake_stat = MagicMock(st_mode=stat.S_IFDIR | 0o755, st_size=0, st_mtime=mtime)
        with patch("icloudy.discovery.evaluator.os.stat", return_value=fake_stat):
            result = PathEvaluator().evaluate(str(tmp_path))

        assert result.exists is True
        assert result.score == 13
        assert result.metadata.stats is not None
        assert result.metadata.stats.mtime == ""

    @pytest.mark.parametrize("value", ["", "not a path", "iCloudDrive", "\x00", "~~~"])
    def test_non_path_strings(self, value: str) -> None:
        """Strings without separators get the invalid-path score."""
        result = PathEvaluator().evaluate(value)

        assert result.score == -100
        assert result.exists is False

    @pytest.mark.parametrize("value", ["/\x00bad", "C:\\\x00", "/" + "a" * 5000, "\\\\?\\weird"])
    def test_never_raises(self, value: str) -> None:
        """Odd inputs are absorbed into a low score."""
        result = PathEvaluator().evaluate(value)

        assert result.score <= 0 or result.exists

    def test_type_is_set_even_when_missing(self) -> None:
        """Classification does not require the path to exist."""
        missing = os.path.join(os.sep, "nowhere", "com~apple~CloudDocs")
        assert PathEvaluator().evaluate(missing).type == PathType.ROOT
