"""Tests for Pydantic models."""

from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from ..models import (
    DeduplicationConfig,
    DeduplicationResult,
    DuplicateGroup,
    EntryFailure,
    FailureStage,
    FileEntry,
    RetentionPlan,
    RetentionStrategy,
    TraversalMode,
)


def create_entry(filename: str, size: int = 100) -> FileEntry:
    return FileEntry(
        file_path=Path(f"/test/{filename}"),
        filename=filename,
        size_bytes=size,
        modified_at=datetime(2024, 1, 1, 12, 0, 0),
    )


class TestFileEntry:
    """Test cases for FileEntry model."""

    def test_create_file_entry(self) -> None:
        """Test creating a FileEntry object."""
        modified = datetime(2023, 1, 1, 12, 30, 0)
        entry = FileEntry(
            file_path=Path("/test/path/report.pdf"),
            filename="report.pdf",
            size_bytes=1048576,
            modified_at=modified,
        )

        assert entry.file_path == Path("/test/path/report.pdf")
        assert entry.filename == "report.pdf"
        assert entry.size_bytes == 1048576
        assert entry.modified_at == modified

    def test_relative_path_made_absolute(self) -> None:
        """Test that relative paths are turned into absolute ones."""
        entry = FileEntry(
            file_path=Path("relative/file.txt"),
            filename="file.txt",
            size_bytes=1,
            modified_at=datetime.now(),
        )

        assert entry.file_path.is_absolute()
        assert entry.file_path == Path("relative/file.txt").absolute()

    def test_negative_size_rejected(self) -> None:
        """Test that sizes must not be negative."""
        with pytest.raises(ValidationError):
            create_entry("bad.bin", size=-1)

    def test_entry_is_immutable(self) -> None:
        """Test that a snapshot cannot be modified."""
        entry = create_entry("a.txt")

        with pytest.raises(ValidationError):
            entry.size_bytes = 5


class TestDuplicateGroup:
    """Test cases for DuplicateGroup model."""

    def test_group_properties(self) -> None:
        """Test file_count and redundant_bytes."""
        group = DuplicateGroup(
            size_bytes=100,
            files=[create_entry("a.txt"), create_entry("b.txt"), create_entry("c.txt")],
        )

        assert group.file_count == 3
        assert group.redundant_bytes == 200

    def test_single_member_rejected(self) -> None:
        """Test that a group needs at least two files."""
        with pytest.raises(ValidationError):
            DuplicateGroup(size_bytes=100, files=[create_entry("a.txt")])

    def test_mixed_sizes_rejected(self) -> None:
        """Test that all members must share the group size."""
        with pytest.raises(ValidationError):
            DuplicateGroup(
                size_bytes=100,
                files=[create_entry("a.txt", 100), create_entry("b.txt", 101)],
            )


class TestRetentionPlan:
    """Test cases for RetentionPlan model."""

    def test_delete_indices(self) -> None:
        """Test that every non-kept index is a deletion candidate."""
        plan = RetentionPlan(group_size=4, keep={1, 3})

        assert plan.delete_indices == [2, 4]
        assert plan.keeps(1)
        assert not plan.keeps(2)

    def test_empty_keep_set_rejected(self) -> None:
        """Test that a plan must keep at least one file."""
        with pytest.raises(ValidationError):
            RetentionPlan(group_size=2, keep=set())

    def test_out_of_range_index_rejected(self) -> None:
        """Test that kept indices must name group members."""
        with pytest.raises(ValidationError):
            RetentionPlan(group_size=2, keep={3})

        with pytest.raises(ValidationError):
            RetentionPlan(group_size=2, keep={0})

    def test_large_groups_supported(self) -> None:
        """Test that selections are not limited to single-digit indices."""
        plan = RetentionPlan(group_size=25, keep={12, 25})

        assert len(plan.delete_indices) == 23


class TestDeduplicationResult:
    """Test cases for DeduplicationResult model."""

    def test_empty_result(self) -> None:
        """Test the defaults of a result without duplicates."""
        result = DeduplicationResult(scan_path=Path("/test"))

        assert result.total_files == 0
        assert result.duplicate_groups == []
        assert result.error is None
        assert result.duplicate_file_count == 0
        assert result.reclaimable_bytes == 0
        assert not result.has_duplicates

    def test_reclaimable_totals(self) -> None:
        """Test the totals derived from duplicate groups."""
        groups = [
            DuplicateGroup(size_bytes=100, files=[create_entry("a"), create_entry("b")]),
            DuplicateGroup(
                size_bytes=10,
                files=[create_entry("c", 10), create_entry("d", 10), create_entry("e", 10)],
            ),
        ]
        result = DeduplicationResult(
            scan_path=Path("/test"),
            total_files=7,
            total_bytes=350,
            duplicate_groups=groups,
            failures=[
                EntryFailure(file_path=Path("/test/x"), stage=FailureStage.SIGNATURE, message="gone")
            ],
        )

        assert result.duplicate_file_count == 3
        assert result.reclaimable_bytes == 120
        assert "2 duplicate groups" in str(result)
        assert "1 unprocessed files" in str(result)


class TestDeduplicationConfig:
    """Test cases for DeduplicationConfig model."""

    def test_defaults(self) -> None:
        """Test default configuration values."""
        config = DeduplicationConfig()

        assert config.sample_points == 4
        assert config.sample_size == 4096
        assert config.traversal_mode is TraversalMode.ALL
        assert config.retention_strategy is RetentionStrategy.FIRST
        assert config.skip_folders_without_duplicates is True
        assert config.dry_run is False

    def test_non_positive_sampling_rejected(self) -> None:
        """Test that sample settings must be positive."""
        with pytest.raises(ValidationError):
            DeduplicationConfig(sample_points=0)

        with pytest.raises(ValidationError):
            DeduplicationConfig(sample_size=-4)

    def test_log_level_normalized(self) -> None:
        """Test that log levels are upper-cased and validated."""
        assert DeduplicationConfig(log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValidationError):
            DeduplicationConfig(log_level="chatty")
