"""Search command for the polaris CLI."""

import dataclasses
import logging
import time
from typing import TYPE_CHECKING, List, Sequence

from polaris.cli.commands.helpers import build_filter, format_timestamp, print_json
from polaris.formats.json_format import records_to_dicts
from polaris.logging_config import log_search
from polaris.search import group_label, highlight_text, run_search
from polaris.types import GroupKey, MemoryRecord, SortKey

if TYPE_CHECKING:
    from polaris.config import SearchConfig

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 120


def _snippet(record: MemoryRecord, query: str, highlight: bool) -> str:
    text = " ".join(record.content.split())
    if len(text) > SNIPPET_LENGTH:
        text = text[:SNIPPET_LENGTH].rstrip() + "..."
    if highlight and query:
        text = highlight_text(text, query, open_tag="**", close_tag="**")
    return text


def _print_records(records: Sequence[MemoryRecord], query: str, highlight: bool, start: int = 1) -> None:
    for i, record in enumerate(records, start):
        tags = f"  #{' #'.join(record.tags)}" if record.tags else ""
        print(f"{i}. [{record.type}] {record.title}{tags}")
        print(f"   {format_timestamp(record.created_at)}  id={record.id}")
        snippet = _snippet(record, query, highlight)
        if snippet:
            print(f"   {snippet}")
        print()


def cmd_search(args, records: List[MemoryRecord], now: int, config: "SearchConfig"):
    """Filter, rank and optionally group records."""
    search_filter = build_filter(args)
    if args.exact:
        config = dataclasses.replace(config, use_fuzzy=False)

    started = time.perf_counter()
    results = run_search(
        records,
        search_filter,
        sort_key=SortKey(args.sort),
        group_key=GroupKey(args.group),
        now=now,
        config=config,
    )
    log_search(
        search_filter.query,
        total=results.total_input,
        matched=results.count,
        sort=args.sort,
        group=args.group,
        duration_ms=(time.perf_counter() - started) * 1000,
    )

    limit = args.limit if args.limit and args.limit > 0 else None

    if args.json:
        shown = results.records[:limit] if limit else results.records
        payload = {
            "query": search_filter.query,
            "total": results.total_input,
            "count": results.count,
            "results": records_to_dicts(shown),
        }
        if args.group != GroupKey.NONE.value:
            payload["groups"] = results.group_ids()
        print_json(payload)
        return

    label = f" for '{search_filter.query}'" if search_filter.query else ""
    if not results.records:
        print(f"No results{label}")
        return

    print(f"Found {results.count} result(s){label}:\n")
    if args.group == GroupKey.NONE.value:
        shown = results.records[:limit] if limit else results.records
        _print_records(shown, search_filter.query, not args.no_highlight)
    else:
        for key, members in results.groups.items():
            print(f"== {group_label(key)} ({len(members)}) ==")
            shown = members[:limit] if limit else members
            _print_records(shown, search_filter.query, not args.no_highlight)

    if limit and results.count > limit and args.group == GroupKey.NONE.value:
        print(f"... {results.count - limit} more (use --limit to show more)")
