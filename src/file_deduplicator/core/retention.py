"""Retention planning: which members of each duplicate group survive."""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import ValidationError

from .errors import PlanInvalid
from .models import DuplicateGroup, FileEntry, RetentionPlan, RetentionStrategy

logger = logging.getLogger(__name__)


def _first_index(
    files: list[FileEntry],
    key: Callable[[FileEntry], Any],
    pick: Callable[[list[Any]], Any],
) -> int:
    """1-based index of the first file whose key equals pick(keys)."""
    keys = [key(file) for file in files]
    target = pick(keys)
    return keys.index(target) + 1


class RetentionPlanner:
    """Builds retention plans from strategies or manual selections."""

    def default_plan(self, group: DuplicateGroup) -> RetentionPlan:
        """Keep only the first-discovered member."""
        return RetentionPlan(group_size=group.file_count, keep={1}, strategy=RetentionStrategy.FIRST)

    def select_index(self, group: DuplicateGroup, strategy: RetentionStrategy) -> int:
        """
        Pick the single member a strategy keeps.

        Ties always go to the earliest member in discovery order.

        Args:
            group: Duplicate group
            strategy: Retention strategy

        Returns:
            1-based index of the kept member
        """
        files = group.files

        if strategy is RetentionStrategy.NEWEST:
            return _first_index(files, lambda f: f.modified_at, max)
        if strategy is RetentionStrategy.OLDEST:
            return _first_index(files, lambda f: f.modified_at, min)
        if strategy is RetentionStrategy.LONGEST_NAME:
            return _first_index(files, lambda f: len(f.filename), max)
        if strategy is RetentionStrategy.SHORTEST_NAME:
            return _first_index(files, lambda f: len(f.filename), min)
        return 1

    def plan(
        self, group: DuplicateGroup, strategy: RetentionStrategy = RetentionStrategy.FIRST
    ) -> RetentionPlan:
        """
        Build the plan a deterministic strategy yields for one group.

        Args:
            group: Duplicate group
            strategy: Retention strategy

        Returns:
            RetentionPlan keeping exactly one member
        """
        index = self.select_index(group, strategy)
        logger.debug(f"Strategy {strategy.value} keeps [{index}] {group.files[index - 1].filename}")
        return RetentionPlan(group_size=group.file_count, keep={index}, strategy=strategy)

    def plan_all(
        self,
        groups: list[DuplicateGroup],
        strategy: RetentionStrategy = RetentionStrategy.FIRST,
    ) -> list[RetentionPlan]:
        """Apply one strategy to every group."""
        plans = [self.plan(group, strategy) for group in groups]
        logger.info(f"Applied retention strategy '{strategy.value}' to {len(plans)} groups")
        return plans

    def manual_plan(self, group: DuplicateGroup, keep: Iterable[int]) -> RetentionPlan:
        """
        Build a plan from an operator's selection.

        Args:
            group: Duplicate group
            keep: Iterable of 1-based member indices to keep

        Returns:
            RetentionPlan keeping exactly the selected members

        Raises:
            PlanInvalid: If the selection is empty or names a missing member
        """
        selection = frozenset(keep)
        if not selection:
            raise PlanInvalid("At least one file must be kept")

        try:
            return RetentionPlan(group_size=group.file_count, keep=selection, strategy=None)
        except ValidationError as e:
            raise PlanInvalid(
                f"Invalid selection {sorted(selection)} for a group of {group.file_count} files"
            ) from e

    def override(
        self,
        plans: list[RetentionPlan],
        groups: list[DuplicateGroup],
        group_number: int,
        keep: Iterable[int],
        fallback: bool = False,
    ) -> list[RetentionPlan]:
        """
        Replace the plan of one group with a manual selection.

        Args:
            plans: Current plans, parallel to groups
            groups: Duplicate groups
            group_number: 1-based group number
            keep: Iterable of 1-based member indices to keep
            fallback: Revert the group to the default plan instead of raising
                when the selection is invalid

        Returns:
            New list of plans; the input list is left untouched

        Raises:
            PlanInvalid: If the group number or selection is invalid and
                fallback is off
        """
        if group_number < 1 or group_number > len(groups):
            raise PlanInvalid(f"Group {group_number} out of range (1-{len(groups)})")

        group = groups[group_number - 1]
        try:
            replacement = self.manual_plan(group, keep)
        except PlanInvalid as e:
            if not fallback:
                raise
            logger.warning(f"Group {group_number}: {e}; keeping the first file instead")
            replacement = self.default_plan(group)

        updated = list(plans)
        updated[group_number - 1] = replacement
        return updated
