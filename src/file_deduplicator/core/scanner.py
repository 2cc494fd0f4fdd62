"""File indexing module for discovering regular files."""

import logging
import os
import time
from collections.abc import Generator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

from .errors import EntryIOError, ScanTargetInvalid
from .models import EntryFailure, FailureStage, FileEntry

logger = logging.getLogger(__name__)


class ProgressCallback(Protocol):
    """Protocol for progress callback functions."""

    def __call__(self, current: int, total: int | None = None, message: str = "") -> None:
        """Called to report progress during scanning."""
        ...


@dataclass
class IndexResult:
    """Files indexed under a root, plus the entries that had to be skipped."""

    entries: list[FileEntry] = field(default_factory=list)
    failures: list[EntryFailure] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(entry.size_bytes for entry in self.entries)


def validate_scan_target(directory: Path) -> Path:
    """
    Check that a scan root exists and is a directory.

    Args:
        directory: Root path supplied by the caller

    Returns:
        The absolute form of the directory

    Raises:
        ScanTargetInvalid: If the path is missing or not a directory
    """
    if not directory.exists():
        raise ScanTargetInvalid(directory, "Directory does not exist")

    if not directory.is_dir():
        raise ScanTargetInvalid(directory, "Path is not a directory")

    return directory.absolute()


class FileIndexer:
    """Enumerates regular files under a root and records their metadata."""

    def get_file_entry(self, file_path: Path) -> FileEntry:
        """
        Snapshot a single file.

        Args:
            file_path: Path to the file

        Returns:
            FileEntry with size and modification time

        Raises:
            EntryIOError: If the file cannot be stat'ed
        """
        try:
            stat = file_path.stat()
        except OSError as e:
            raise EntryIOError(file_path, f"Cannot stat file ({e.strerror or e})") from e

        return FileEntry(
            file_path=file_path,
            filename=file_path.name,
            size_bytes=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime),
        )

    def discover_files(
        self,
        directory: Path,
        recursive: bool = True,
        failures: list[EntryFailure] | None = None,
    ) -> Generator[Path, None, None]:
        """
        Discover regular files in a directory, optionally recursively.

        Symbolic links are never followed or reported. Directories that
        cannot be listed are logged and skipped.

        Args:
            directory: Directory to scan
            recursive: Whether to scan subdirectories recursively
            failures: Optional list collecting entries that were skipped

        Yields:
            Path objects for discovered regular files
        """
        pending = [directory]

        while pending:
            current = pending.pop(0)
            try:
                with os.scandir(current) as it:
                    children = list(it)
            except OSError as e:
                logger.warning(f"Cannot list directory {current}: {e}")
                if failures is not None:
                    failures.append(
                        EntryFailure(
                            file_path=Path(current), stage=FailureStage.INDEX, message=str(e)
                        )
                    )
                continue

            subdirs = []
            for child in children:
                path = Path(child.path)
                try:
                    if child.is_symlink():
                        logger.warning(f"Skipping symbolic link: {path}")
                        continue
                    if child.is_dir(follow_symlinks=False):
                        subdirs.append(path)
                    elif child.is_file(follow_symlinks=False):
                        yield path
                except OSError as e:
                    logger.warning(f"Skipping inaccessible entry {path}: {e}")
                    if failures is not None:
                        failures.append(
                            EntryFailure(file_path=path, stage=FailureStage.INDEX, message=str(e))
                        )

            if recursive:
                pending[0:0] = subdirs

    def index(
        self,
        directory: Path,
        recursive: bool = True,
        progress_callback: ProgressCallback | None = None,
    ) -> IndexResult:
        """
        Index a directory and return metadata for every regular file.

        Args:
            directory: Directory to scan
            recursive: Whether to scan subdirectories recursively
            progress_callback: Optional callback for progress updates

        Returns:
            IndexResult with entries in enumeration order and skipped files

        Raises:
            ScanTargetInvalid: If the directory is missing or not a directory
        """
        directory = validate_scan_target(directory)
        start_time = time.time()
        result = IndexResult()

        logger.info(f"Starting file indexing: {directory}")

        for file_path in self.discover_files(directory, recursive, result.failures):
            try:
                result.entries.append(self.get_file_entry(file_path))
            except EntryIOError as e:
                logger.warning(str(e))
                result.failures.append(
                    EntryFailure(file_path=file_path, stage=FailureStage.INDEX, message=e.message)
                )
                continue

            if progress_callback:
                progress_callback(len(result.entries), None, f"Indexed {len(result.entries)} files...")

        logger.info(
            f"Indexing complete: {len(result.entries)} files, {result.total_bytes} bytes, "
            f"{len(result.failures)} skipped in {time.time() - start_time:.2f} seconds"
        )
        return result

    def collect_folders(self, directory: Path) -> list[Path]:
        """
        Collect the root and every subdirectory beneath it.

        Args:
            directory: Root directory

        Returns:
            Folders sorted by path length, so parents come before their children

        Raises:
            ScanTargetInvalid: If the directory is missing or not a directory
        """
        directory = validate_scan_target(directory)
        folders = [directory]

        for root, dirs, _files in os.walk(directory, onerror=self._log_walk_error):
            root_path = Path(root)
            for name in dirs:
                path = root_path / name
                if path.is_symlink():
                    logger.debug(f"Not descending into symbolic link: {path}")
                    continue
                folders.append(path)

        folders.sort(key=lambda p: len(str(p)))
        logger.info(f"Found {len(folders)} folders under {directory}")
        return folders

    @staticmethod
    def _log_walk_error(error: OSError) -> None:
        logger.warning(f"Error while walking directories: {error}")
