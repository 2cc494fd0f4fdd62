"""Candidate grouping by size and sampled signature."""

import logging
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field

from .errors import EntryIOError
from .models import EntryFailure, FailureStage, FileEntry
from .signature import SignatureSampler

logger = logging.getLogger(__name__)


@dataclass
class SignatureGrouping:
    """Signature buckets derived from one size bucket."""

    buckets: dict[str, list[FileEntry]] = field(default_factory=dict)
    failures: list[EntryFailure] = field(default_factory=list)


class BucketClassifier:
    """Narrows files down to candidate buckets before byte comparison."""

    def group_by_size(self, files: list[FileEntry]) -> dict[int, list[FileEntry]]:
        """
        Group files by exact size.

        Args:
            files: File entries in enumeration order

        Returns:
            Dictionary mapping sizes to files; only sizes shared by two or more
            files are kept, and insertion order is preserved within each bucket

        Example:
            >>> classifier = BucketClassifier()
            >>> buckets = classifier.group_by_size([a_10b, b_10b, c_20b])
            >>> buckets  # {10: [a_10b, b_10b]}
        """
        groups: dict[int, list[FileEntry]] = defaultdict(list)
        for file in files:
            groups[file.size_bytes].append(file)

        buckets = {size: group for size, group in groups.items() if len(group) > 1}
        logger.info(
            f"Grouped {len(files)} files into {len(groups)} sizes, "
            f"{len(buckets)} shared by more than one file"
        )
        return buckets

    def group_by_signature(
        self, bucket: list[FileEntry], sampler: SignatureSampler
    ) -> SignatureGrouping:
        """
        Split one size bucket by sampled signature.

        Files whose signature cannot be computed are dropped from the bucket
        and reported as failures.

        Args:
            bucket: Files that all share one size
            sampler: Signature sampler to fingerprint each file

        Returns:
            SignatureGrouping with buckets of two or more files
        """
        grouping = SignatureGrouping()
        groups: dict[str, list[FileEntry]] = defaultdict(list)

        for file in bucket:
            try:
                groups[sampler.signature(file)].append(file)
            except EntryIOError as e:
                logger.warning(f"Signature failed, excluding file: {e}")
                grouping.failures.append(
                    EntryFailure(file_path=e.path, stage=FailureStage.SIGNATURE, message=e.message)
                )

        grouping.buckets = {sig: files for sig, files in groups.items() if len(files) > 1}
        return grouping

    def candidate_buckets(
        self,
        files: list[FileEntry],
        sampler: SignatureSampler,
        failures: list[EntryFailure] | None = None,
    ) -> Iterator[list[FileEntry]]:
        """
        Yield every candidate bucket: same size, same signature, two or more files.

        Buckets are produced one size at a time, so a caller may stop between
        them and still keep everything processed so far.

        Args:
            files: File entries in enumeration order
            sampler: Signature sampler
            failures: Optional list collecting signature failures

        Yields:
            Lists of candidate files in discovery order
        """
        for size_bucket in self.group_by_size(files).values():
            grouping = self.group_by_signature(size_bucket, sampler)
            if failures is not None:
                failures.extend(grouping.failures)
            for signature, candidates in grouping.buckets.items():
                logger.debug(f"Candidate bucket {signature}: {len(candidates)} files")
                yield candidates
