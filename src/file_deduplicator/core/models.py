"""Pydantic models for the file deduplicator."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TraversalMode(str, Enum):
    """How the scan root is traversed."""

    ALL = "all"  # one recursive scan over the whole tree
    FOLDER = "folder"  # each folder scanned on its own, non-recursively


class RetentionStrategy(str, Enum):
    """Deterministic rules for choosing the surviving member of a group."""

    FIRST = "first"
    NEWEST = "newest"
    OLDEST = "oldest"
    LONGEST_NAME = "longest-name"
    SHORTEST_NAME = "shortest-name"

    @property
    def description(self) -> str:
        """Human-readable description for help text."""
        mapping = {
            RetentionStrategy.FIRST: "Keep the file discovered first",
            RetentionStrategy.NEWEST: "Keep the most recently modified file",
            RetentionStrategy.OLDEST: "Keep the least recently modified file",
            RetentionStrategy.LONGEST_NAME: "Keep the file with the longest name",
            RetentionStrategy.SHORTEST_NAME: "Keep the file with the shortest name",
        }
        return mapping[self]


class FailureStage(str, Enum):
    """Pipeline stage at which a per-file error occurred."""

    INDEX = "index"
    SIGNATURE = "signature"
    COMPARE = "compare"
    DELETE = "delete"


class DeletionStatus(str, Enum):
    """What happened to a deletion candidate."""

    DELETED = "deleted"
    WOULD_DELETE = "would-delete"
    FAILED = "failed"


class FileEntry(BaseModel):
    """Snapshot of a regular file taken at scan time."""

    model_config = ConfigDict(frozen=True)

    file_path: Path = Field(..., description="Absolute path to the file")
    filename: str = Field(..., description="Just the filename")
    size_bytes: int = Field(..., ge=0, description="File size in bytes")
    modified_at: datetime = Field(..., description="File modification timestamp")

    @field_validator("file_path")
    @classmethod
    def validate_file_path(cls, v: Path) -> Path:
        """Ensure path is absolute."""
        return v.absolute()

    def __str__(self) -> str:
        return f"{self.filename} ({self.size_bytes} bytes)"


class EntryFailure(BaseModel):
    """A recoverable error that excluded one file from processing."""

    file_path: Path
    stage: FailureStage
    message: str

    def __str__(self) -> str:
        return f"[{self.stage.value}] {self.file_path}: {self.message}"


class DuplicateGroup(BaseModel):
    """Files verified to be byte-for-byte identical.

    Files are kept in discovery order. The first one is the canonical member
    only by convention: enumeration order is platform defined, so it carries
    no meaning unless a retention strategy is chosen explicitly.
    """

    size_bytes: int = Field(..., ge=0, description="Size shared by every member")
    files: list[FileEntry] = Field(..., min_length=2, description="Members in discovery order")

    @model_validator(mode="after")
    def check_uniform_size(self) -> "DuplicateGroup":
        """Reject members whose size differs from the group size."""
        for file in self.files:
            if file.size_bytes != self.size_bytes:
                raise ValueError(
                    f"{file.file_path} has {file.size_bytes} bytes, group has {self.size_bytes}"
                )
        return self

    @property
    def file_count(self) -> int:
        """Number of files in this group."""
        return len(self.files)

    @property
    def redundant_bytes(self) -> int:
        """Bytes occupied by every copy beyond the first."""
        return self.size_bytes * (self.file_count - 1)

    def __str__(self) -> str:
        return f"Duplicate group ({self.file_count} files, {self.size_bytes} bytes each)"


class RetentionPlan(BaseModel):
    """Which members of one duplicate group survive, as 1-based indices."""

    model_config = ConfigDict(frozen=True)

    group_size: int = Field(..., ge=2, description="Number of members in the group")
    keep: frozenset[int] = Field(..., description="1-based indices of the kept members")
    strategy: RetentionStrategy | None = Field(
        None, description="Strategy that produced the plan, None for a manual selection"
    )

    @model_validator(mode="after")
    def check_keep_set(self) -> "RetentionPlan":
        """A plan must keep at least one valid member."""
        if not self.keep:
            raise ValueError("at least one file must be kept")
        invalid = sorted(i for i in self.keep if i < 1 or i > self.group_size)
        if invalid:
            raise ValueError(f"indices {invalid} out of range 1-{self.group_size}")
        return self

    @property
    def delete_indices(self) -> list[int]:
        """1-based indices of the members that are deletion candidates."""
        return [i for i in range(1, self.group_size + 1) if i not in self.keep]

    def keeps(self, index: int) -> bool:
        """True if the 1-based member index survives."""
        return index in self.keep


class DeduplicationResult(BaseModel):
    """Results from one scan invocation."""

    scan_path: Path = Field(..., description="Directory that was scanned")
    total_files: int = Field(0, ge=0, description="Regular files indexed")
    total_bytes: int = Field(0, ge=0, description="Sum of indexed file sizes")
    duplicate_groups: list[DuplicateGroup] = Field(default_factory=list)
    failures: list[EntryFailure] = Field(
        default_factory=list, description="Files that could not be processed"
    )
    error: str | None = Field(None, description="Fatal error message, if the scan failed")
    scan_duration_seconds: float = Field(0.0, ge=0, description="Time taken to scan")
    scan_timestamp: datetime = Field(
        default_factory=datetime.now, description="When the scan was performed"
    )

    @property
    def duplicate_file_count(self) -> int:
        """Files that could be deleted if one copy per group is kept."""
        return sum(group.file_count - 1 for group in self.duplicate_groups)

    @property
    def reclaimable_bytes(self) -> int:
        """Space freed if one copy per group is kept."""
        return sum(group.redundant_bytes for group in self.duplicate_groups)

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicate_groups)

    def __str__(self) -> str:
        return (
            f"Scan of {self.scan_path}: {self.total_files} files, "
            f"{len(self.duplicate_groups)} duplicate groups, "
            f"{len(self.failures)} unprocessed files"
        )


class DeletionOutcome(BaseModel):
    """Result of handling one deletion candidate."""

    file_path: Path
    group_number: int = Field(..., ge=1)
    member_index: int = Field(..., ge=1)
    size_bytes: int = Field(..., ge=0)
    status: DeletionStatus
    error: str | None = None


class DeletionSummary(BaseModel):
    """Aggregate statistics of a deletion pass."""

    kept: int = 0
    deleted: int = 0
    failed: int = 0
    bytes_reclaimed: int = 0
    dry_run: bool = False
    outcomes: list[DeletionOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> list[DeletionOutcome]:
        return [o for o in self.outcomes if o.status is DeletionStatus.FAILED]


class DeduplicationConfig(BaseModel):
    """Configuration settings for a deduplication run."""

    sample_points: int = Field(default=4, gt=0, description="Interior sample offsets per file")
    sample_size: int = Field(default=4096, gt=0, description="Bytes read at each sample offset")
    compare_chunk_size: int = Field(
        default=64 * 1024, gt=0, description="Chunk size for byte-exact comparison"
    )
    traversal_mode: TraversalMode = Field(default=TraversalMode.ALL)
    dry_run: bool = Field(default=False, description="Report deletions without touching files")
    skip_folders_without_duplicates: bool = Field(
        default=True, description="In per-folder mode, silently skip folders with no duplicates"
    )
    retention_strategy: RetentionStrategy = Field(default=RetentionStrategy.FIRST)
    auto_confirm: bool = Field(default=False, description="Answer yes to every confirmation")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the level is one the CLI knows."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"unknown log level: {v}")
        return level
