"""Tests for retention planning."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from ..errors import PlanInvalid
from ..models import DuplicateGroup, FileEntry, RetentionStrategy
from ..retention import RetentionPlanner


class TestRetentionPlanner:
    """Test cases for RetentionPlanner."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.planner = RetentionPlanner()
        self.base_time = datetime(2024, 1, 1, 12, 0, 0)

    def create_entry(self, filename: str, days_old: int = 0) -> FileEntry:
        """Create a FileEntry modified the given number of days before base_time."""
        return FileEntry(
            file_path=Path(f"/test/{filename}"),
            filename=filename,
            size_bytes=1000,
            modified_at=self.base_time - timedelta(days=days_old),
        )

    def create_group(self, *files: FileEntry) -> DuplicateGroup:
        return DuplicateGroup(size_bytes=1000, files=list(files))

    def test_default_plan_keeps_first(self) -> None:
        """Test that the default plan keeps only the first-discovered file."""
        group = self.create_group(self.create_entry("b.txt"), self.create_entry("a.txt"))

        plan = self.planner.default_plan(group)

        assert plan.keep == frozenset({1})
        assert plan.delete_indices == [2]
        assert plan.strategy is RetentionStrategy.FIRST

    def test_newest_keeps_max_mtime(self) -> None:
        """Test that newest keeps the file with the latest modification time."""
        group = self.create_group(
            self.create_entry("old.txt", days_old=10),
            self.create_entry("new.txt", days_old=1),
            self.create_entry("mid.txt", days_old=5),
        )

        plan = self.planner.plan(group, RetentionStrategy.NEWEST)

        assert plan.keep == frozenset({2})

    def test_oldest_keeps_min_mtime(self) -> None:
        """Test that oldest keeps the file with the earliest modification time."""
        group = self.create_group(
            self.create_entry("mid.txt", days_old=5),
            self.create_entry("new.txt", days_old=1),
            self.create_entry("old.txt", days_old=10),
        )

        plan = self.planner.plan(group, RetentionStrategy.OLDEST)

        assert plan.keep == frozenset({3})

    def test_timestamp_tie_goes_to_first(self) -> None:
        """Test that equal timestamps resolve to the earliest member."""
        group = self.create_group(
            self.create_entry("a.txt", days_old=3),
            self.create_entry("b.txt", days_old=1),
            self.create_entry("c.txt", days_old=1),
        )

        assert self.planner.plan(group, RetentionStrategy.NEWEST).keep == frozenset({2})

    def test_longest_name(self) -> None:
        """Test that longest-name keeps the longest filename, first on ties."""
        group = self.create_group(
            self.create_entry("a.txt"),
            self.create_entry("abcd.txt"),
            self.create_entry("wxyz.txt"),
        )

        assert self.planner.plan(group, RetentionStrategy.LONGEST_NAME).keep == frozenset({2})

    def test_shortest_name(self) -> None:
        """Test that shortest-name keeps the shortest filename, first on ties."""
        group = self.create_group(
            self.create_entry("long_name.txt"),
            self.create_entry("b.txt"),
            self.create_entry("c.txt"),
        )

        assert self.planner.plan(group, RetentionStrategy.SHORTEST_NAME).keep == frozenset({2})

    @pytest.mark.parametrize("strategy", list(RetentionStrategy))
    def test_every_strategy_keeps_exactly_one(self, strategy: RetentionStrategy) -> None:
        """Test that deterministic strategies always keep a single valid member."""
        group = self.create_group(
            self.create_entry("x.txt", days_old=2),
            self.create_entry("yy.txt", days_old=7),
            self.create_entry("zzz.txt", days_old=4),
        )

        plan = self.planner.plan(group, strategy)

        assert len(plan.keep) == 1
        assert plan.keep <= {1, 2, 3}
        assert plan.strategy is strategy

    def test_plan_all(self) -> None:
        """Test that one strategy is applied to every group."""
        groups = [
            self.create_group(self.create_entry("a", 3), self.create_entry("b", 1)),
            self.create_group(self.create_entry("c", 1), self.create_entry("d", 3)),
        ]

        plans = self.planner.plan_all(groups, RetentionStrategy.NEWEST)

        assert [plan.keep for plan in plans] == [frozenset({2}), frozenset({1})]

    def test_manual_plan_multiple_members(self) -> None:
        """Test that an operator may keep several members."""
        group = self.create_group(*(self.create_entry(f"f{i}") for i in range(12)))

        plan = self.planner.manual_plan(group, [1, 10, 12])

        assert plan.keep == frozenset({1, 10, 12})
        assert plan.strategy is None
        assert len(plan.delete_indices) == 9

    def test_manual_plan_empty_rejected(self) -> None:
        """Test that an empty selection is rejected."""
        group = self.create_group(self.create_entry("a"), self.create_entry("b"))

        with pytest.raises(PlanInvalid):
            self.planner.manual_plan(group, [])

    def test_manual_plan_out_of_range_rejected(self) -> None:
        """Test that selections must name existing members."""
        group = self.create_group(self.create_entry("a"), self.create_entry("b"))

        with pytest.raises(PlanInvalid):
            self.planner.manual_plan(group, [3])

        with pytest.raises(PlanInvalid):
            self.planner.manual_plan(group, [0])

    def test_override_replaces_one_group(self) -> None:
        """Test that override returns new plans with one group replaced."""
        groups = [
            self.create_group(self.create_entry("a"), self.create_entry("b")),
            self.create_group(self.create_entry("c"), self.create_entry("d"), self.create_entry("e")),
        ]
        plans = self.planner.plan_all(groups)

        updated = self.planner.override(plans, groups, 2, [2, 3])

        assert updated[0] == plans[0]
        assert updated[1].keep == frozenset({2, 3})
        assert plans[1].keep == frozenset({1})

    def test_override_invalid_raises_without_fallback(self) -> None:
        """Test that an invalid override is rejected by default."""
        groups = [self.create_group(self.create_entry("a"), self.create_entry("b"))]
        plans = self.planner.plan_all(groups, RetentionStrategy.SHORTEST_NAME)

        with pytest.raises(PlanInvalid):
            self.planner.override(plans, groups, 1, [])

    def test_override_invalid_falls_back_to_default(self) -> None:
        """Test that with fallback an invalid override keeps the first file."""
        groups = [self.create_group(self.create_entry("aaa", 5), self.create_entry("b", 1))]
        plans = self.planner.plan_all(groups, RetentionStrategy.NEWEST)

        updated = self.planner.override(plans, groups, 1, [], fallback=True)

        assert updated[0].keep == frozenset({1})

    def test_override_unknown_group(self) -> None:
        """Test that group numbers are checked even with fallback."""
        groups = [self.create_group(self.create_entry("a"), self.create_entry("b"))]
        plans = self.planner.plan_all(groups)

        with pytest.raises(PlanInvalid):
            self.planner.override(plans, groups, 2, [1], fallback=True)
