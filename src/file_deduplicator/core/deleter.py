"""Applies retention plans by deleting (or simulating deletion of) redundant copies."""

import logging
import os
from pathlib import Path

from .errors import PlanInvalid
from .models import (
    DeletionOutcome,
    DeletionStatus,
    DeletionSummary,
    DuplicateGroup,
    RetentionPlan,
)

logger = logging.getLogger(__name__)


class DeletionExecutor:
    """Deletes every group member its plan does not keep."""

    def __init__(self, dry_run: bool = False):
        """
        Initialize the executor.

        Args:
            dry_run: Report deletion candidates without touching the filesystem
        """
        self.dry_run = dry_run

    def execute(
        self, groups: list[DuplicateGroup], plans: list[RetentionPlan]
    ) -> DeletionSummary:
        """
        Apply retention plans to their groups.

        A failed deletion is logged and counted; the remaining files are still
        processed. Only successfully deleted files (or, in a dry run, the files
        that would be deleted) count towards bytes_reclaimed.

        Args:
            groups: Duplicate groups
            plans: One plan per group, in the same order

        Returns:
            DeletionSummary with counts, reclaimed bytes and per-file outcomes

        Raises:
            PlanInvalid: If plans do not line up with groups
        """
        self._check_plans(groups, plans)

        summary = DeletionSummary(dry_run=self.dry_run)
        mode = "Dry run" if self.dry_run else "Deleting"
        logger.info(f"{mode}: applying retention plans to {len(groups)} groups")

        for group_number, (group, plan) in enumerate(zip(groups, plans), 1):
            for member_index, file in enumerate(group.files, 1):
                if plan.keeps(member_index):
                    summary.kept += 1
                    continue

                outcome = self._remove(file.file_path, file.size_bytes, group_number, member_index)
                summary.outcomes.append(outcome)

                if outcome.status is DeletionStatus.FAILED:
                    summary.failed += 1
                else:
                    summary.deleted += 1
                    summary.bytes_reclaimed += outcome.size_bytes

        logger.info(
            f"{mode} complete: {summary.deleted} deleted, {summary.failed} failed, "
            f"{summary.kept} kept, {summary.bytes_reclaimed} bytes reclaimed"
        )
        return summary

    def _remove(
        self, file_path: Path, size_bytes: int, group_number: int, member_index: int
    ) -> DeletionOutcome:
        """Delete one file, or pretend to in a dry run."""
        outcome = DeletionOutcome(
            file_path=file_path,
            group_number=group_number,
            member_index=member_index,
            size_bytes=size_bytes,
            status=DeletionStatus.WOULD_DELETE,
        )

        if self.dry_run:
            logger.info(f"[dry run] Would delete: {file_path}")
            return outcome

        try:
            os.remove(file_path)
        except OSError as e:
            logger.error(f"Failed to delete {file_path}: {e}")
            return outcome.model_copy(update={"status": DeletionStatus.FAILED, "error": str(e)})

        logger.info(f"Deleted: {file_path}")
        return outcome.model_copy(update={"status": DeletionStatus.DELETED})

    @staticmethod
    def _check_plans(groups: list[DuplicateGroup], plans: list[RetentionPlan]) -> None:
        if len(groups) != len(plans):
            raise PlanInvalid(f"Got {len(plans)} plans for {len(groups)} groups")

        for group_number, (group, plan) in enumerate(zip(groups, plans), 1):
            if plan.group_size != group.file_count:
                raise PlanInvalid(
                    f"Plan for group {group_number} covers {plan.group_size} files, "
                    f"group has {group.file_count}"
                )
            if not plan.keep:
                raise PlanInvalid(f"Plan for group {group_number} keeps no files")
