"""Exception hierarchy for the deduplication pipeline."""

from pathlib import Path


class DeduplicationError(Exception):
    """Base class for all deduplication errors."""


class ScanTargetInvalid(DeduplicationError, NotADirectoryError):
    """The scan root is missing or is not a directory. Fatal."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class EntryIOError(DeduplicationError, OSError):
    """A single file could not be stat'ed, read, compared or deleted.

    Always recoverable: the file is excluded from further processing and
    the failure is reported, but the batch continues.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class PlanInvalid(DeduplicationError, ValueError):
    """A retention plan would leave a group without any kept member."""
