"""File copy pipeline.

Plans a copy into the best discovered iCloud folder and executes it
with per-file failure isolation:

- ``analyze`` is strict: a bad source, no target, a directory without
  ``recursive`` or an empty file list raises a CopyError.
- ``copy`` (``analyze`` followed by ``execute``) reports: one file
  failing never stops the others; failures are collected in the
  CopyResult.
"""

import fnmatch
import logging
import os
from pathlib import Path

from icloudy.core.config import TransferConfig
from icloudy.core.deadline import Deadline, is_expired
from icloudy.discovery.search import PathFinder
from icloudy.models.path_info import SearchOptions
from icloudy.models.transfer import CopyOptions, CopyResult, FileAnalysis

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "*"


class CopyError(Exception):
    """Base exception for copy planning errors."""


class SourceNotFoundError(CopyError):
    """Raised when the source path does not exist."""


class NoValidTargetPathError(CopyError):
    """Raised when discovery yields no usable target folder."""


class RecursionRequiredError(CopyError):
    """Raised when a directory is copied without ``recursive``."""


class NoFilesToCopyError(CopyError):
    """Raised when the source contains no matching files."""


class _ReadError(OSError):
    pass


class _WriteError(OSError):
    pass


class FileCopier:
    """Copies local files into discovered iCloud folders.

    Args:
        finder: PathFinder used to resolve target folders.
        config: Transfer settings; defaults to TransferConfig().
    """

    def __init__(self, finder: PathFinder, config: TransferConfig | None = None) -> None:
        self._finder = finder
        self._config = config or TransferConfig()

    def analyze(self, options: CopyOptions, *, deadline: Deadline | None = None) -> FileAnalysis:
        """Resolve targets and enumerate the files to copy.

        Args:
            options: Copy options (``overwrite`` and ``dry_run`` are ignored).
            deadline: Forwarded to discovery.

        Returns:
            FileAnalysis describing the copy plan.

        Raises:
            SourceNotFoundError: If the source does not exist.
            NoValidTargetPathError: If no target folder is found.
            RecursionRequiredError: If the source is a directory and
                ``recursive`` is False.
            NoFilesToCopyError: If no file matches.
        """
        source = os.path.abspath(options.source)
        if not os.path.exists(source):
            raise SourceNotFoundError(f"Source path does not exist: {source}")

        target_paths = self._finder.find(
            SearchOptions(app_name=options.app, min_score=self._config.min_score),
            deadline=deadline,
        )
        if not target_paths:
            raise NoValidTargetPathError("No valid target paths found")

        files = self._find_files_to_copy(source, options)
        if not files:
            raise NoFilesToCopyError("No files to copy")

        return FileAnalysis(
            source=source,
            target_paths=target_paths,
            files_to_copy=files,
            total_files=len(files),
            total_size=_total_size(files),
        )

    def copy(self, options: CopyOptions, *, deadline: Deadline | None = None) -> CopyResult:
        """Plan and execute a copy.

        Planning errors from ``analyze`` propagate unchanged. Per-file
        errors are recorded in the result and never abort the run.

        Args:
            options: Copy options.
            deadline: Files not started before this expires are recorded
                as failed.

        Returns:
            CopyResult; ``success`` is False if any file failed.
        """
        analysis = self.analyze(options, deadline=deadline)
        return self.execute(analysis, options, deadline=deadline)

    def execute(
        self,
        analysis: FileAnalysis,
        options: CopyOptions,
        *,
        deadline: Deadline | None = None,
    ) -> CopyResult:
        """Execute a copy plan produced by ``analyze``.

        Discovery is not repeated, so the files and targets are exactly
        those in ``analysis``.

        Args:
            analysis: Plan to execute.
            options: Supplies ``overwrite`` and ``dry_run``.
            deadline: Files not started before this expires are recorded
                as failed.

        Returns:
            CopyResult; ``success`` is False if any file failed.
        """
        result = CopyResult(target_path=analysis.target_paths[0].path)

        base = analysis.source
        if os.path.isfile(base):
            base = os.path.dirname(base)

        for target in analysis.target_paths:
            for source_file in analysis.files_to_copy:
                destination = os.path.join(target.path, os.path.relpath(source_file, base))

                if is_expired(deadline):
                    result.record_failure(
                        source_file, f"Deadline exceeded before copying {source_file}"
                    )
                    continue

                if options.dry_run:
                    logger.info("Dry-run: would copy %s -> %s", source_file, destination)
                    result.record_success(source_file)
                    continue

                error = self._copy_single(source_file, destination, overwrite=options.overwrite)
                if error is None:
                    result.record_success(source_file)
                else:
                    logger.warning("Copy failed: %s", error)
                    result.record_failure(source_file, error)

        return result

    def _copy_single(self, source: str, destination: str, *, overwrite: bool) -> str | None:
        """Copy one file.

        Returns:
            None on success, otherwise the error message.
        """
        try:
            Path(destination).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return f"Failed to write to {destination}: {e}"

        if not overwrite and os.path.lexists(destination):
            return f"Target file already exists: {destination}"

        try:
            self._stream_copy(source, destination)
        except _ReadError as e:
            return f"Failed to read {source}: {e}"
        except OSError as e:
            return f"Failed to write to {destination}: {e}"
        return None

    def _stream_copy(self, source: str, destination: str) -> None:
        """Copy bytes in chunks, tagging errors with the failing side.

        A destination left incomplete by a failure is removed.
        """
        chunk_size = self._config.chunk_size
        try:
            reader = open(source, "rb")  # noqa: SIM115
        except OSError as e:
            raise _ReadError(str(e)) from e

        with reader:
            try:
                writer = open(destination, "wb")  # noqa: SIM115
            except OSError as e:
                raise _WriteError(str(e)) from e

            try:
                with writer:
                    while True:
                        try:
                            chunk = reader.read(chunk_size)
                        except OSError as e:
                            raise _ReadError(str(e)) from e
                        if not chunk:
                            break
                        try:
                            writer.write(chunk)
                        except OSError as e:
                            raise _WriteError(str(e)) from e
            except OSError:
                _remove_partial(destination)
                raise

    @staticmethod
    def _find_files_to_copy(source: str, options: CopyOptions) -> list[str]:
        if os.path.isfile(source):
            return [source]

        if not options.recursive:
            raise RecursionRequiredError("Source must be a file when recursive is false")

        files: list[str] = []
        _walk_directory(source, options.pattern or DEFAULT_PATTERN, files)
        return files


def _remove_partial(destination: str) -> None:
    try:
        os.remove(destination)
    except OSError as e:
        logger.warning("Cannot remove incomplete file %s: %s", destination, e)


def _walk_directory(directory: str, pattern: str, files: list[str]) -> None:
    """Depth-first walk collecting files whose basename matches ``pattern``.

    Every subdirectory is entered regardless of the pattern. Symlinked
    directories are not followed.
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except PermissionError:
        logger.warning("Permission denied scanning directory: %s", directory)
        return
    except OSError as e:
        logger.warning("Cannot scan directory %s: %s", directory, e)
        return

    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                _walk_directory(entry.path, pattern, files)
            elif entry.is_file() and fnmatch.fnmatchcase(entry.name, pattern):
                files.append(entry.path)
        except OSError:
            logger.debug("Cannot determine type of: %s", entry.path)


def _total_size(files: list[str]) -> int:
    """Sum file sizes; unreadable files contribute 0."""
    total = 0
    for path in files:
        try:
            total += os.stat(path).st_size
        except OSError:
            continue
    return total
