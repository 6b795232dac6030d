#!/usr/bin/env python3
"""
CLI for comparing directory snapshots.

Usage:
    snapdiff diff    --old old.tar.gz --new new.tar.gz --output report.html [--format html|json]
    snapdiff inspect --archive snapshot.tar.gz [--json]

Options common to both commands:
    --config cfg.yaml   YAML settings (ignore list, separators, policies)
    --workers N         Extraction threads per snapshot
    -v / --verbose      Debug logging
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config.config_loader import DiffConfig, load_config
from .core.exceptions import ConfigError, SnapDiffError
from .core.logging import configure_logging
from .diff.engine import diff_stores
from .diff.report import REPORT_FORMATS, render_html, render_json, write_report
from .snapshot.store import load_snapshot

logger = logging.getLogger("snapdiff.cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_CHANGES = 3


def setup_logging(config: DiffConfig, verbose: bool = False) -> None:
    """Configure logging from config, with --verbose forcing DEBUG."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO)
    configure_logging(level=level, structured=config.structured_logs)


def build_config(args) -> DiffConfig:
    """Load config file/env and apply command-line overrides."""
    config = load_config(Path(args.config) if args.config else None)

    if args.ignore:
        config = config.with_extra_ignored(args.ignore)

    if args.workers is not None:
        config = DiffConfig.from_dict({**config.to_dict(), "workers": args.workers})

    return config


def cmd_diff(args, config: DiffConfig) -> int:
    """Compare two snapshots and write a report."""
    old_path = Path(args.old)
    new_path = Path(args.new)

    for label, path in (("--old", old_path), ("--new", new_path)):
        if not path.exists():
            logger.error(f"Snapshot not found for {label}: {path}")
            return EXIT_USAGE

    old_store = load_snapshot(old_path, config)
    new_store = load_snapshot(new_path, config)

    logger.info(f"{old_path.name} -> files: {old_store.stats.files}, objects: {old_store.stats.objects}")
    logger.info(f"{new_path.name} -> files: {new_store.stats.files}, objects: {new_store.stats.objects}")

    result = diff_stores(old_store, new_store)

    if args.format == "json":
        content = render_json(
            result,
            old_name=str(old_path.resolve()),
            new_name=str(new_path.resolve()),
            extra={
                "old_stats": old_store.stats.to_dict(),
                "new_stats": new_store.stats.to_dict(),
            },
        )
    else:
        content = render_html(
            result,
            old_name=str(old_path.resolve()),
            new_name=str(new_path.resolve()),
            separators=config.separators,
            ignored_attributes=config.ignored_attributes,
        )

    output_path = write_report(content, Path(args.output))

    print(result.summary())
    if args.json:
        print("\n" + json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    print(f"\nWrote -> {output_path.resolve()}")

    if args.fail_on_changes and not result.is_empty:
        return EXIT_CHANGES
    return EXIT_OK


def cmd_inspect(args, config: DiffConfig) -> int:
    """Load one snapshot and print its statistics."""
    archive_path = Path(args.archive)
    if not archive_path.exists():
        logger.error(f"Snapshot not found: {archive_path}")
        return EXIT_USAGE

    store = load_snapshot(archive_path, config)
    stats = store.stats

    if args.json:
        print(json.dumps({"snapshot": archive_path.name, "distinct_keys": len(store), **stats.to_dict()}, indent=2))
        return EXIT_OK

    lines = [
        f"Snapshot: {archive_path.name}",
        f"  Payloads: {stats.files}",
        f"  Objects extracted: {stats.objects}",
        f"  Distinct keys: {len(store)}",
        f"  Duplicate keys: {stats.duplicates}",
        f"  Candidates without key: {stats.skipped_candidates}",
        f"  Malformed payloads: {stats.parse_errors}",
    ]
    if stats.error_labels:
        lines.append(f"    {', '.join(stats.error_labels)}")
    print("\n".join(lines))
    return EXIT_OK


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--workers", type=int, help="Extraction threads per snapshot")
    parser.add_argument(
        "--ignore",
        action="append",
        metavar="ATTRIBUTE",
        help="Additional attribute to ignore (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Also print results as JSON")


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="snapdiff",
        description="Directory snapshot diff",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Diff command
    diff_parser = subparsers.add_parser("diff", help="Compare two snapshots")
    diff_parser.add_argument("--old", required=True, help="Older snapshot (.tar.gz, .zip or directory)")
    diff_parser.add_argument("--new", required=True, help="Newer snapshot (.tar.gz, .zip or directory)")
    diff_parser.add_argument("--output", required=True, help="Report output path")
    diff_parser.add_argument("--format", choices=REPORT_FORMATS, default="html", help="Report format")
    diff_parser.add_argument(
        "--fail-on-changes",
        action="store_true",
        help=f"Exit with code {EXIT_CHANGES} when the snapshots differ",
    )
    _add_common_options(diff_parser)

    # Inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Show statistics for one snapshot")
    inspect_parser.add_argument("--archive", required=True, help="Snapshot (.tar.gz, .zip or directory)")
    _add_common_options(inspect_parser)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = parse_args(argv)

    if not args.command:
        print("No command specified. Use --help for usage.", file=sys.stderr)
        return EXIT_USAGE

    try:
        config = build_config(args)
    except (ConfigError, OSError) as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return EXIT_USAGE

    setup_logging(config, verbose=args.verbose)

    try:
        if args.command == "diff":
            return cmd_diff(args, config)
        elif args.command == "inspect":
            return cmd_inspect(args, config)
    except SnapDiffError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return EXIT_ERROR
    except Exception as e:
        logger.error(f"Unexpected error: {type(e).__name__}: {e}", exc_info=args.verbose)
        return EXIT_ERROR

    print(f"Unknown command: {args.command}", file=sys.stderr)
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
