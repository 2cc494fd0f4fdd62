"""Core functionality for the file deduplicator."""

from .deleter import DeletionExecutor
from .errors import DeduplicationError, EntryIOError, PlanInvalid, ScanTargetInvalid
from .grouper import BucketClassifier, SignatureGrouping
from .matcher import ExactMatcher, MatchResult
from .models import (
    DeduplicationConfig,
    DeduplicationResult,
    DeletionOutcome,
    DeletionStatus,
    DeletionSummary,
    DuplicateGroup,
    EntryFailure,
    FailureStage,
    FileEntry,
    RetentionPlan,
    RetentionStrategy,
    TraversalMode,
)
from .pipeline import DuplicateFinder
from .retention import RetentionPlanner
from .scanner import FileIndexer, IndexResult
from .signature import SignatureSampler

__all__ = [
    "BucketClassifier",
    "DeduplicationConfig",
    "DeduplicationError",
    "DeduplicationResult",
    "DeletionExecutor",
    "DeletionOutcome",
    "DeletionStatus",
    "DeletionSummary",
    "DuplicateFinder",
    "DuplicateGroup",
    "EntryFailure",
    "EntryIOError",
    "ExactMatcher",
    "FailureStage",
    "FileEntry",
    "FileIndexer",
    "IndexResult",
    "MatchResult",
    "PlanInvalid",
    "RetentionPlan",
    "RetentionPlanner",
    "RetentionStrategy",
    "ScanTargetInvalid",
    "SignatureGrouping",
    "SignatureSampler",
    "TraversalMode",
]
