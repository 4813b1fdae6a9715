"""Copy pipeline models.

This module defines the options, plan and result structures exchanged
between the file copier and its callers.
"""

from dataclasses import dataclass, field
from typing import Any

from icloudy.models.path_info import PathInfo


@dataclass(frozen=True, slots=True)
class CopyOptions:
    """Options for planning and executing a copy.

    Attributes:
        source: Source file or directory.
        app: Application name used to pick the target folder (None = any root).
        pattern: Glob matched against file basenames (None = everything).
        recursive: Required to copy a directory.
        overwrite: Replace files that already exist at the destination.
        dry_run: Compute and report the plan without touching the filesystem.
    """

    source: str
    app: str | None = None
    pattern: str | None = None
    recursive: bool = False
    overwrite: bool = False
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class FileAnalysis:
    """Copy plan produced by FileCopier.analyze().

    Attributes:
        source: Resolved absolute source path.
        target_paths: Candidate destinations, best first.
        files_to_copy: Absolute paths of files to copy.
        total_files: Number of files to copy.
        total_size: Sum of readable file sizes in bytes.
    """

    source: str
    target_paths: list[PathInfo]
    files_to_copy: list[str]
    total_files: int
    total_size: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "target_paths": [p.path for p in self.target_paths],
            "files_to_copy": self.files_to_copy,
            "total_files": self.total_files,
            "total_size": self.total_size,
        }


@dataclass(slots=True)
class CopyResult:
    """Outcome of FileCopier.copy().

    ``copied_files`` and ``failed_files`` hold source file paths;
    ``errors`` holds one message per failed file, in the same order.

    Attributes:
        success: True iff no file failed.
        target_path: Best target path of the plan.
        copied_files: Source files copied (or that would be, in dry-run).
        failed_files: Source files that could not be copied.
        errors: Error messages for the failed files.
    """

    target_path: str
    copied_files: list[str] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True iff no file failed."""
        return not self.failed_files

    def record_success(self, source_file: str) -> None:
        """Record a copied file."""
        self.copied_files.append(source_file)

    def record_failure(self, source_file: str, error: str) -> None:
        """Record a failed file and its error message."""
        self.failed_files.append(source_file)
        self.errors.append(error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "target_path": self.target_path,
            "copied_files": self.copied_files,
            "failed_files": self.failed_files,
            "errors": self.errors,
        }
