"""Duplicate detection pipeline: index, bucket, sample, verify."""

import logging
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from .errors import ScanTargetInvalid
from .grouper import BucketClassifier
from .matcher import ExactMatcher
from .models import DeduplicationConfig, DeduplicationResult, TraversalMode
from .scanner import FileIndexer, ProgressCallback
from .signature import SignatureSampler

logger = logging.getLogger(__name__)


class DuplicateFinder:
    """Runs the detection stages and folds their results into a DeduplicationResult."""

    def __init__(self, config: DeduplicationConfig | None = None):
        """
        Initialize the finder with configuration.

        Args:
            config: Deduplication configuration, defaults to DeduplicationConfig()
        """
        self.config = config or DeduplicationConfig()
        self.indexer = FileIndexer()
        self.classifier = BucketClassifier()
        self.sampler = SignatureSampler(self.config.sample_points, self.config.sample_size)
        self.matcher = ExactMatcher(self.config.compare_chunk_size)

    def find_duplicates(
        self,
        directory: Path,
        recursive: bool = True,
        progress_callback: ProgressCallback | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> DeduplicationResult:
        """
        Find verified duplicate groups under a directory.

        Args:
            directory: Directory to scan
            recursive: Whether to include subdirectories
            progress_callback: Optional callback for progress updates
            should_stop: Optional predicate checked between candidate buckets;
                when it returns True the groups found so far are returned

        Returns:
            DeduplicationResult for the scan

        Raises:
            ScanTargetInvalid: If the directory is missing or not a directory
        """
        start_time = time.time()
        indexed = self.indexer.index(directory, recursive, progress_callback)

        result = DeduplicationResult(
            scan_path=directory.absolute(),
            total_files=len(indexed.entries),
            total_bytes=indexed.total_bytes,
            failures=list(indexed.failures),
        )

        buckets = self.classifier.candidate_buckets(indexed.entries, self.sampler, result.failures)
        for checked, bucket in enumerate(buckets, 1):
            if should_stop and should_stop():
                logger.info("Scan stopped early, returning completed buckets")
                break

            if progress_callback:
                progress_callback(checked, None, f"Verifying {len(bucket)} candidates...")

            matched = self.matcher.find_exact_duplicates(bucket)
            result.duplicate_groups.extend(matched.groups)
            result.failures.extend(matched.failures)

        result.scan_duration_seconds = time.time() - start_time
        logger.info(
            f"Found {len(result.duplicate_groups)} duplicate groups "
            f"({result.duplicate_file_count} redundant files) in {directory}"
        )
        return result

    def scan_per_folder(
        self,
        directory: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> Iterator[DeduplicationResult]:
        """
        Scan every folder under a root on its own.

        Files are only compared with siblings in the same folder. Folders are
        visited parents first. With skip_folders_without_duplicates set,
        folders without duplicates are not yielded.

        Args:
            directory: Root directory
            progress_callback: Optional callback for progress updates

        Yields:
            One DeduplicationResult per folder

        Raises:
            ScanTargetInvalid: If the root is missing or not a directory
        """
        folders = self.indexer.collect_folders(directory)

        for i, folder in enumerate(folders, 1):
            if progress_callback:
                progress_callback(i, len(folders), f"Processing folder {folder}")

            try:
                result = self.find_duplicates(folder, recursive=False)
            except ScanTargetInvalid as e:
                # The folder vanished after it was collected
                logger.warning(str(e))
                yield DeduplicationResult(scan_path=folder, error=str(e))
                continue

            if not result.has_duplicates and self.config.skip_folders_without_duplicates:
                logger.debug(f"Skipping folder without duplicates: {folder}")
                continue

            yield result

    def run(
        self,
        directory: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> list[DeduplicationResult]:
        """
        Scan according to the configured traversal mode.

        Returns:
            A single result in ALL mode, one result per reported folder in FOLDER mode
        """
        if self.config.traversal_mode is TraversalMode.FOLDER:
            return list(self.scan_per_folder(directory, progress_callback))
        return [self.find_duplicates(directory, True, progress_callback)]
