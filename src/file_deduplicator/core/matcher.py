"""Byte-exact verification of candidate buckets."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .errors import EntryIOError
from .models import DuplicateGroup, EntryFailure, FailureStage, FileEntry

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class MatchResult:
    """Verified groups from one candidate bucket."""

    groups: list[DuplicateGroup] = field(default_factory=list)
    failures: list[EntryFailure] = field(default_factory=list)


class ExactMatcher:
    """Confirms duplicates by comparing full file contents."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def files_identical(self, file1: FileEntry, file2: FileEntry) -> bool:
        """
        Compare two files byte for byte.

        Args:
            file1: First file
            file2: Second file

        Returns:
            True only if both files hold exactly the same bytes

        Raises:
            EntryIOError: If either file cannot be opened or read
        """
        if file1.size_bytes != file2.size_bytes:
            return False

        if file1.size_bytes == 0:
            return True

        try:
            with open(file1.file_path, "rb") as f1, open(file2.file_path, "rb") as f2:
                remaining = file1.size_bytes
                while remaining > 0:
                    to_read = min(self.chunk_size, remaining)
                    chunk1 = f1.read(to_read)
                    chunk2 = f2.read(to_read)

                    if len(chunk1) != to_read or len(chunk2) != to_read:
                        logger.debug(f"Length changed while comparing {file1.filename}")
                        return False
                    if chunk1 != chunk2:
                        return False
                    remaining -= to_read

                # Both must end exactly at the recorded size
                return f1.read(1) == f2.read(1) == b""
        except OSError as e:
            failed = Path(e.filename) if e.filename else file1.file_path
            raise EntryIOError(failed, f"Cannot compare file ({e.strerror or e})") from e

    def find_exact_duplicates(self, bucket: list[FileEntry]) -> MatchResult:
        """
        Split a candidate bucket into groups of identical files.

        Each unprocessed file seeds a group; every later unprocessed file that
        matches it joins the group. A pair whose comparison fails is treated
        as non-duplicate and the failure is recorded.

        Args:
            bucket: Files sharing a size and signature, in discovery order

        Returns:
            MatchResult with groups of two or more members, in discovery order
        """
        result = MatchResult()
        processed = [False] * len(bucket)
        failed_paths = set()

        for i, seed in enumerate(bucket):
            if processed[i]:
                continue
            processed[i] = True
            members = [seed]

            for j in range(i + 1, len(bucket)):
                if processed[j]:
                    continue
                try:
                    if self.files_identical(seed, bucket[j]):
                        members.append(bucket[j])
                        processed[j] = True
                except EntryIOError as e:
                    logger.warning(f"Comparison failed for {seed.filename} and {bucket[j].filename}: {e}")
                    if e.path not in failed_paths:
                        failed_paths.add(e.path)
                        result.failures.append(
                            EntryFailure(
                                file_path=e.path, stage=FailureStage.COMPARE, message=e.message
                            )
                        )

            if len(members) > 1:
                result.groups.append(DuplicateGroup(size_bytes=seed.size_bytes, files=members))
                logger.debug(f"Confirmed {len(members)} identical copies of {seed.filename}")

        return result
