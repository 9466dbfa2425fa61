from __future__ import annotations

import argparse
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from lruprune import __version__
from lruprune.models import EvictionReport, age_floor_from_minutes

EXIT_SHORTFALL = 3
TIME_FORMAT = "%m/%d/%Y %H:%M:%S"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class ReclaimConfig:
    root: Path
    target_available_space: int
    older_than: int
    dry_run: bool
    verbose: bool
    exclude: tuple[str, ...]
    report: Path | None
    fail_on_shortfall: bool


def main(argv: Iterable[str] | None = None) -> int:
    config = parse_args(argv)
    setup_logging(config.verbose)

    root = config.root
    if not root.exists() or not root.is_dir():
        raise SystemExit(f"Path does not exist or is not a directory: {root}")

    from lruprune.reclaimer import reclaim, write_report
    from lruprune.sources import SpaceProbeError, WalkMetadataSource

    try:
        report = reclaim(
            root,
            config.target_available_space,
            age_floor_from_minutes(config.older_than),
            dry_run=config.dry_run,
            source=WalkMetadataSource(config.exclude),
        )
    except SpaceProbeError as exc:
        raise SystemExit(str(exc)) from exc

    print_report(report, verbose=config.verbose)
    if config.report is not None:
        try:
            write_report(config.report, report)
        except OSError as exc:
            raise SystemExit(f"Cannot write report to {config.report}: {exc}") from exc

    if config.fail_on_shortfall and not report.target_reached:
        return EXIT_SHORTFALL
    return 0


def parse_args(argv: Iterable[str] | None = None) -> ReclaimConfig:
    parser = argparse.ArgumentParser(
        prog="lruprune",
        description=(
            "Turn a directory into an LRU cache. When the filesystem holding PATH "
            "has fewer than --target-available-space free bytes, delete files in "
            "least-recently-accessed order until the target is reached."
        ),
    )
    parser.add_argument(
        "path",
        help="Top-level directory to reclaim files from",
    )
    parser.add_argument(
        "-t",
        "--target-available-space",
        type=int,
        required=True,
        help="Minimum free space in bytes to leave on the filesystem",
    )
    parser.add_argument(
        "-o",
        "--older-than",
        type=int,
        default=0,
        help="Only delete files last accessed more than this many minutes ago",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the files that would be removed instead of removing them",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Glob to never delete (repeatable, relative to path)",
    )
    parser.add_argument("--report", default=None, help="Write a JSON report to this file")
    parser.add_argument(
        "--fail-on-shortfall",
        action="store_true",
        help=f"Exit with status {EXIT_SHORTFALL} if the target could not be reached",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.target_available_space < 0:
        parser.error("--target-available-space must not be negative")
    if args.older_than < 0:
        parser.error("--older-than must not be negative")

    return ReclaimConfig(
        root=Path(args.path).resolve(),
        target_available_space=args.target_available_space,
        older_than=args.older_than,
        dry_run=args.dry_run,
        verbose=args.verbose,
        exclude=tuple(args.exclude),
        report=Path(args.report) if args.report else None,
        fail_on_shortfall=args.fail_on_shortfall,
    )


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_report(report: EvictionReport, verbose: bool) -> None:
    for evicted in report.evicted:
        accessed = datetime.fromtimestamp(evicted.accessed).strftime(TIME_FORMAT)
        if report.dry_run:
            print(f"{accessed} {evicted.path}")
        elif verbose:
            print(f"Deleted {accessed} {evicted.path}")
    if verbose:
        print(f"Deleted {report.freed_bytes} bytes")


if __name__ == "__main__":
    raise SystemExit(main())
