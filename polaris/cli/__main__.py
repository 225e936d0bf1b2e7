"""
Polaris CLI - search, statistics, duplicate detection and export over a
snapshot of memory records.

Usage:
    polaris search [QUERY] [--type T]... [--tag T]... [--sort KEY] [--group KEY] [--json]
    polaris stats [--json]
    polaris duplicates [--threshold X] [--json]
    polaris export [QUERY] [--format json|csv|markdown] [--output PATH]
    polaris mcp

The record file comes from ``--records`` or ``POLARIS_RECORDS_FILE``.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from polaris.cli.commands import (
    add_filter_arguments,
    cmd_duplicates,
    cmd_export,
    cmd_search,
    cmd_stats,
)
from polaris.config import SearchConfig, load_config
from polaris.formats import VALID_FORMATS, FormatError, load_records
from polaris.logging_config import setup_polaris_logging
from polaris.types import VALID_GROUP_KEYS, VALID_SORT_KEYS, MemoryRecord, now_ms

logger = logging.getLogger(__name__)

COMMANDS = {
    "search": cmd_search,
    "stats": cmd_stats,
    "duplicates": cmd_duplicates,
    "export": cmd_export,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polaris",
        description="Search and analyze a personal memory snapshot",
    )
    parser.add_argument(
        "--records", "-r", help="Record file (.json, .csv, .md); defaults to POLARIS_RECORDS_FILE"
    )
    parser.add_argument(
        "--records-format", choices=VALID_FORMATS, help="Override format detection for --records"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # search
    p_search = subparsers.add_parser("search", help="Search records")
    add_filter_arguments(p_search)
    p_search.add_argument("--sort", "-s", choices=VALID_SORT_KEYS, default="relevance")
    p_search.add_argument("--group", "-g", choices=VALID_GROUP_KEYS, default="none")
    p_search.add_argument("--limit", "-l", type=int, default=20, help="Max results (0 = all)")
    p_search.add_argument("--no-highlight", action="store_true", help="Do not mark matches")
    p_search.add_argument("--json", "-j", action="store_true")

    # stats
    p_stats = subparsers.add_parser("stats", help="Show record statistics")
    p_stats.add_argument("--top-tags", type=int, default=10, help="Number of tags to list")
    p_stats.add_argument("--json", "-j", action="store_true")

    # duplicates
    p_dup = subparsers.add_parser("duplicates", help="Find near-duplicate titles")
    p_dup.add_argument(
        "--threshold", type=float, default=None, help="Similarity threshold in [0, 1]"
    )
    p_dup.add_argument("--json", "-j", action="store_true")

    # export
    p_export = subparsers.add_parser("export", help="Export records")
    add_filter_arguments(p_export)
    p_export.add_argument("--format", "-f", choices=VALID_FORMATS, default=None)
    p_export.add_argument("--output", "-o", help="Output file (default: stdout)")
    p_export.add_argument("--sort", "-s", choices=VALID_SORT_KEYS, default="date-desc")

    # mcp
    subparsers.add_parser("mcp", help="Start MCP server (stdio transport)")

    return parser


def resolve_records_path(args, config: SearchConfig) -> Path:
    if args.records:
        return Path(args.records).expanduser()
    if config.records_file is not None:
        return config.records_file
    raise ValueError("No record file given (use --records or set POLARIS_RECORDS_FILE)")


def cmd_mcp(args, config: SearchConfig):
    """Start MCP server."""
    from polaris.mcp.server import main as mcp_main

    path = Path(args.records).expanduser() if args.records else config.records_file
    mcp_main(records_path=path)


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config()

    try:
        setup_polaris_logging(config.log_level, config.data_dir)
    except OSError as e:
        logger.warning(f"File logging disabled: {e}")

    try:
        if args.command == "mcp":
            cmd_mcp(args, config)
            return

        path = resolve_records_path(args, config)
        records: List[MemoryRecord] = load_records(path, args.records_format)
        now = now_ms()
        COMMANDS[args.command](args, records, now, config)
    except FileNotFoundError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)
    except FormatError as e:
        print(f"✗ Could not read records: {e}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, TypeError) as e:
        logger.error(f"Input validation error: {e}")
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
