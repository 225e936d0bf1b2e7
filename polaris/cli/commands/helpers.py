"""Shared helper functions for CLI commands."""

import argparse
import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from polaris.types import SearchFilter, SearchIn, datetime_to_ms, safe_ms_to_datetime
from polaris.validation import sanitize_string

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_input(value: str, field_name: str, max_length: int = 1000) -> str:
    """Validate and sanitize a CLI argument; blank values are allowed."""
    return sanitize_string(value, field_name, max_length, required=False)


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def parse_date_arg(value: str, end_of_day: bool = False) -> int:
    """Parse an ISO date or datetime into epoch milliseconds.

    A bare date means the start of that UTC day, or its last millisecond
    when *end_of_day* is set (so ``--to 2026-01-31`` includes the 31st).
    """
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}' (use YYYY-MM-DD or ISO datetime)")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if end_of_day and _DATE_ONLY.match(text):
        parsed = parsed + timedelta(days=1) - timedelta(milliseconds=1)
    return datetime_to_ms(parsed)


def date_from_arg(value: str) -> int:
    return parse_date_arg(value)


def date_to_arg(value: str) -> int:
    return parse_date_arg(value, end_of_day=True)


def format_timestamp(ms: Optional[int]) -> str:
    dt = safe_ms_to_datetime(ms) if ms else None
    if dt is None:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M")


def add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    """Flags that build a SearchFilter (shared by search and export)."""
    parser.add_argument("query", nargs="?", default="", help="Query text (supports \"phrases\", +req, -excl, AND/OR/NOT)")
    parser.add_argument("--type", "-t", dest="types", action="append", help="Include record type (repeatable)")
    parser.add_argument("--exclude-type", dest="exclude_types", action="append", help="Exclude record type (repeatable)")
    parser.add_argument("--tag", dest="tags", action="append", help="Match any of these tags (repeatable)")
    parser.add_argument("--from", dest="date_from", type=date_from_arg, help="Created on/after (YYYY-MM-DD or ISO)")
    parser.add_argument("--to", dest="date_to", type=date_to_arg, help="Created on/before (YYYY-MM-DD or ISO)")
    parser.add_argument("--in", dest="search_in", choices=[s.value for s in SearchIn], default="all", help="Fields to match the query against")
    parser.add_argument("--status", action="append", help="Include status (repeatable)")
    parser.add_argument("--priority", action="append", help="Include priority (repeatable)")
    parser.add_argument("--sentiment", action="append", help="Include sentiment (repeatable)")
    related = parser.add_mutually_exclusive_group()
    related.add_argument("--related", dest="has_relationships", action="store_const", const=True, help="Only records with relationships")
    related.add_argument("--unrelated", dest="has_relationships", action="store_const", const=False, help="Only records without relationships")
    parser.add_argument("--exact", action="store_true", help="Disable fuzzy matching (substring only)")


def _clean_list(values: Optional[List[str]], field_name: str) -> List[str]:
    return [validate_input(v, field_name, 200) for v in (values or [])]


def build_filter(args) -> SearchFilter:
    """Build a SearchFilter from parsed filter arguments."""
    query = validate_input(getattr(args, "query", "") or "", "query", 500)
    return SearchFilter(
        query=query,
        types=_clean_list(getattr(args, "types", None), "type"),
        exclude_types=_clean_list(getattr(args, "exclude_types", None), "exclude-type"),
        tags=_clean_list(getattr(args, "tags", None), "tag"),
        date_from=getattr(args, "date_from", None),
        date_to=getattr(args, "date_to", None),
        search_in=SearchIn(getattr(args, "search_in", None) or "all"),
        status=_clean_list(args.status, "status") if getattr(args, "status", None) else None,
        priority=_clean_list(args.priority, "priority") if getattr(args, "priority", None) else None,
        sentiment=(
            _clean_list(args.sentiment, "sentiment") if getattr(args, "sentiment", None) else None
        ),
        has_relationships=getattr(args, "has_relationships", None),
    )
