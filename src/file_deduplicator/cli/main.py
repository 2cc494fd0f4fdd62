"""CLI entry point for the file deduplicator."""

import argparse
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from .. import __version__
from ..core import (
    DeduplicationConfig,
    DeduplicationResult,
    DeletionExecutor,
    DeletionSummary,
    DuplicateFinder,
    PlanInvalid,
    RetentionPlan,
    RetentionPlanner,
    RetentionStrategy,
    ScanTargetInvalid,
    TraversalMode,
)

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def format_file_size(size: int) -> str:
    """Render a byte count as B, KB, MB or GB with two decimals."""
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    unit = 0
    while value >= 1024.0 and unit < len(units) - 1:
        value /= 1024.0
        unit += 1
    return f"{value:.2f} {units[unit]}"


def parse_keep_option(value: str) -> tuple[int, list[int]]:
    """
    Parse a --keep value of the form GROUP=I,J,...

    Raises:
        argparse.ArgumentTypeError: If the value is malformed
    """
    group, sep, indices = value.partition("=")
    try:
        if not sep:
            raise ValueError
        group_number = int(group)
        keep = [int(i) for i in indices.split(",") if i.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid selection '{value}', expected GROUP=INDEX[,INDEX...]"
        ) from None
    return group_number, keep


def ask_for_confirmation(
    question: str,
    default_yes: bool = False,
    auto_confirm: bool = False,
    input_func: Callable[[str], str] = input,
) -> bool:
    """Ask a yes/no question; an empty answer or closed input picks the default."""
    if auto_confirm:
        print(f"{question} (auto-confirmed: yes)")
        return True

    try:
        response = input_func(f"{question} [{'Y/n' if default_yes else 'y/N'}]: ").strip()
    except EOFError:
        print()
        return default_yes
    if not response:
        return default_yes
    return response[0].lower() == "y"


def print_scan_results(scan_result: DeduplicationResult, detailed: bool = False) -> None:
    """
    Print scan statistics to console.

    Args:
        scan_result: Results from the scan operation
        detailed: Whether to list the files that could not be processed
    """
    print("\n" + "=" * 60)
    print("SCAN RESULTS")
    print("=" * 60)

    print(f"Directory scanned: {scan_result.scan_path}")
    print(f"Files scanned: {scan_result.total_files} ({format_file_size(scan_result.total_bytes)})")
    print(f"Duplicate groups: {len(scan_result.duplicate_groups)}")
    print(f"Deletable files: {scan_result.duplicate_file_count}")
    print(f"Reclaimable space: {format_file_size(scan_result.reclaimable_bytes)}")
    print(f"Scan time: {scan_result.scan_duration_seconds:.2f}s")

    if scan_result.failures:
        print(f"Files that could not be processed: {len(scan_result.failures)}")
        if detailed:
            for failure in scan_result.failures:
                print(f"  - {failure}")


def print_retention_plan(scan_result: DeduplicationResult, plans: list[RetentionPlan]) -> None:
    """Print every group with its kept and deleted members numbered."""
    print("\n" + "-" * 60)
    print("DUPLICATE GROUPS")
    print("-" * 60)

    for group_number, (group, plan) in enumerate(zip(scan_result.duplicate_groups, plans), 1):
        print(
            f"\nGroup {group_number} ({group.file_count} files, "
            f"{format_file_size(group.size_bytes)} each):"
        )
        for index, file in enumerate(group.files, 1):
            marker = "✓ keep  " if plan.keeps(index) else "✗ delete"
            print(f"  [{index}] {marker} {file.filename}")
            print(f"      Path: {file.file_path.parent}")
            print(f"      Modified: {file.modified_at.strftime('%Y-%m-%d %H:%M:%S')}")


def print_deletion_summary(summary: DeletionSummary) -> None:
    """Print what a deletion pass did."""
    print("\n" + "=" * 60)
    print("DRY RUN COMPLETE" if summary.dry_run else "DELETION COMPLETE")
    print("=" * 60)
    print(f"Files kept: {summary.kept}")
    print(f"Files {'to delete' if summary.dry_run else 'deleted'}: {summary.deleted}")
    if summary.failed:
        print(f"Failed to delete: {summary.failed}")
        for outcome in summary.failures:
            print(f"  - [{outcome.group_number}.{outcome.member_index}] {outcome.file_path}: {outcome.error}")
    print(f"Space reclaimed: {format_file_size(summary.bytes_reclaimed)}")
    if summary.dry_run:
        print("Note: this was a dry run, no files were deleted.")


def build_plans(
    scan_result: DeduplicationResult,
    strategy: RetentionStrategy,
    overrides: list[tuple[int, list[int]]] | None = None,
) -> list[RetentionPlan]:
    """
    Plan every group with one strategy, then apply manual selections.

    Invalid selections fall back to keeping the first file of the group.

    Raises:
        PlanInvalid: If an override names a group that does not exist
    """
    planner = RetentionPlanner()
    groups = scan_result.duplicate_groups
    plans = planner.plan_all(groups, strategy)
    for group_number, keep in overrides or []:
        plans = planner.override(plans, groups, group_number, keep, fallback=True)
    return plans


def process_result(
    scan_result: DeduplicationResult,
    config: DeduplicationConfig,
    overrides: list[tuple[int, list[int]]] | None = None,
    input_func: Callable[[str], str] = input,
    detailed: bool = False,
) -> DeletionSummary | None:
    """
    Show a scan result, confirm, and apply its retention plan.

    Returns:
        The deletion summary, or None when nothing was deleted
    """
    print_scan_results(scan_result, detailed)

    if not scan_result.has_duplicates:
        print("\n✅ No duplicates found!")
        return None

    plans = build_plans(scan_result, config.retention_strategy, overrides)
    print_retention_plan(scan_result, plans)

    if not config.dry_run and not ask_for_confirmation(
        "\nDelete duplicate files according to this plan? This cannot be undone.",
        auto_confirm=config.auto_confirm,
        input_func=input_func,
    ):
        print("❌ Deletion skipped.")
        return None

    summary = DeletionExecutor(dry_run=config.dry_run).execute(scan_result.duplicate_groups, plans)
    print_deletion_summary(summary)
    return summary


def run_global(
    directory: Path,
    config: DeduplicationConfig,
    overrides: list[tuple[int, list[int]]] | None = None,
    input_func: Callable[[str], str] = input,
    detailed: bool = False,
) -> DeletionSummary | None:
    """Find duplicates across the whole tree and process them together."""
    finder = DuplicateFinder(config)
    print(f"Scanning directory: {directory}")
    scan_result = finder.find_duplicates(directory, recursive=True)
    return process_result(scan_result, config, overrides, input_func, detailed)


def run_per_folder(
    directory: Path,
    config: DeduplicationConfig,
    input_func: Callable[[str], str] = input,
    detailed: bool = False,
) -> tuple[int, int]:
    """
    Find and process duplicates folder by folder.

    Each folder is scanned only when the previous one has been handled, so
    stopping at the prompt leaves the remaining folders unread.

    Returns:
        Tuple of (processed folders, folders that failed)
    """
    finder = DuplicateFinder(config)
    processed = 0
    failed = 0
    position = {"current": 0, "total": 0}

    def track_folder(current: int, total: int | None = None, message: str = "") -> None:
        position["current"] = current
        position["total"] = total or 0

    print(f"Scanning folders under: {directory}")

    for scan_result in finder.scan_per_folder(directory, track_folder):
        print("\n" + "-" * 60)
        print(f"[{position['current']}/{position['total']}] Folder: {scan_result.scan_path}")
        print("-" * 60)

        if scan_result.error:
            print(f"Error: {scan_result.error}")
            failed += 1
        else:
            process_result(scan_result, config, input_func=input_func, detailed=detailed)
            processed += 1

        if position["current"] < position["total"] and not ask_for_confirmation(
            "\nContinue with the next folder?",
            default_yes=True,
            auto_confirm=config.auto_confirm,
            input_func=input_func,
        ):
            print("⏹️  Stopped by user.")
            break

    print("\n" + "=" * 60)
    print(f"Folders processed: {processed}")
    if failed:
        print(f"Folders that failed: {failed}")
    return processed, failed


def json_report(reports: list[tuple[DeduplicationResult, list[RetentionPlan], DeletionSummary | None]]) -> str:
    """Serialize scans with their plans and optional deletion summaries."""
    payload = [
        {
            "scan": scan_result.model_dump(mode="json"),
            "plans": [sorted(plan.keep) for plan in plans],
            "deletion": summary.model_dump(mode="json") if summary else None,
        }
        for scan_result, plans, summary in reports
    ]
    return json.dumps(payload, indent=2)


def run_json(
    directory: Path,
    config: DeduplicationConfig,
    overrides: list[tuple[int, list[int]]] | None = None,
) -> str:
    """
    Scan in the configured mode and report as JSON, never prompting.

    Deletion only happens with dry_run or auto_confirm set. Manual
    selections apply in ALL mode only.
    """
    finder = DuplicateFinder(config)
    per_folder = config.traversal_mode is TraversalMode.FOLDER
    reports = []

    for scan_result in finder.run(directory):
        plans = build_plans(scan_result, config.retention_strategy, None if per_folder else overrides)
        summary = None
        if scan_result.has_duplicates and (config.dry_run or config.auto_confirm):
            summary = DeletionExecutor(config.dry_run).execute(scan_result.duplicate_groups, plans)
        reports.append((scan_result, plans, summary))

    return json_report(reports)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="File Deduplicator - find byte-identical files and delete redundant copies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview what would be deleted across a whole tree
  file-deduplicator /path/to/data --dry-run

  # Keep the newest copy of every file, without prompting
  file-deduplicator /path/to/data --strategy newest --yes

  # Only compare files that live in the same folder
  file-deduplicator /path/to/data --mode folder

  # Keep members 1 and 3 of group 2
  file-deduplicator /path/to/data --keep 2=1,3
        """,
    )

    parser.add_argument("directory", type=Path, help="Directory to scan")

    parser.add_argument(
        "-d", "--dry-run", action="store_true", help="Report deletions without deleting anything"
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Confirm every prompt automatically")
    parser.add_argument(
        "-m",
        "--mode",
        choices=[mode.value for mode in TraversalMode],
        default=TraversalMode.ALL.value,
        help="all: one scan over the whole tree; folder: each folder on its own (default: all)",
    )
    parser.add_argument(
        "-n", "--no-skip", action="store_true", help="Report folders without duplicates too"
    )
    parser.add_argument(
        "-p", "--points", type=int, default=4, help="Number of sample points per file (default: 4)"
    )
    parser.add_argument(
        "-s", "--size", type=int, default=4096, help="Bytes read per sample point (default: 4096)"
    )
    parser.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in RetentionStrategy],
        default=RetentionStrategy.FIRST.value,
        help="Which copy to keep in every group (default: first). "
        + "; ".join(f"{strategy.value}: {strategy.description}" for strategy in RetentionStrategy),
    )
    parser.add_argument(
        "--keep",
        type=parse_keep_option,
        action="append",
        default=[],
        metavar="GROUP=I,J",
        help="Keep the listed members of a group (all mode only, repeatable)",
    )
    parser.add_argument(
        "--detailed", action="store_true", help="List files that could not be processed"
    )
    parser.add_argument(
        "--output-format",
        choices=["text", "json"],
        default="text",
        help="Output format for results (default: text)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def config_from_args(args: argparse.Namespace) -> DeduplicationConfig:
    """Build a validated configuration from parsed arguments."""
    return DeduplicationConfig(
        sample_points=args.points,
        sample_size=args.size,
        traversal_mode=TraversalMode(args.mode),
        dry_run=args.dry_run,
        skip_folders_without_duplicates=not args.no_skip,
        retention_strategy=RetentionStrategy(args.strategy),
        auto_confirm=args.yes,
        log_level=args.log_level,
    )


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.keep and args.mode == TraversalMode.FOLDER.value:
        parser.error(
            "--keep selects groups of a whole-tree scan and cannot be combined with --mode folder"
        )

    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"Error: invalid options: {e}")
        return 1

    setup_logging(config.log_level)

    try:
        if args.output_format == "json":
            print(run_json(args.directory, config, args.keep))
        elif config.traversal_mode is TraversalMode.FOLDER:
            run_per_folder(args.directory, config, detailed=args.detailed)
        else:
            run_global(args.directory, config, args.keep, detailed=args.detailed)

        return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 1
    except ScanTargetInvalid as e:
        print(f"Error: {e}")
        return 1
    except PlanInvalid as e:
        print(f"Error: {e}")
        return 1
    except Exception as e:
        logger.exception("Unexpected error occurred")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
