"""Validators and handlers for polaris MCP tools.

Validators take raw tool arguments and return a sanitized dict (raising
``ValueError`` on bad input). Handlers take the sanitized arguments, the
current record snapshot, ``now`` and the active ``SearchConfig``, and
return the tool's text result.
"""

import dataclasses
import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Sequence

from polaris.config import SearchConfig
from polaris.formats.json_format import records_to_dicts
from polaris.logging_config import log_duplicates, log_search, log_stats
from polaris.search import calculate_stats, find_duplicates, highlight_text, run_search
from polaris.types import (
    VALID_GROUP_KEYS,
    VALID_SEARCH_IN,
    VALID_SORT_KEYS,
    GroupKey,
    MemoryRecord,
    SearchFilter,
    SearchIn,
    SortKey,
)
from polaris.validation import (
    sanitize_array,
    sanitize_string,
    validate_enum,
    validate_number,
    validate_timestamp,
)

logger = logging.getLogger(__name__)


def _optional_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return value


def _optional_list(arguments: Dict[str, Any], key: str) -> Optional[list]:
    if arguments.get(key) is None:
        return None
    return sanitize_array(arguments.get(key), key, 200, 50)


# =============================================================================
# VALIDATORS
# =============================================================================


def validate_memory_search(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["query"] = sanitize_string(arguments.get("query"), "query", 500, required=False)
    sanitized["types"] = sanitize_array(arguments.get("types"), "types", 100, 50)
    sanitized["exclude_types"] = sanitize_array(
        arguments.get("exclude_types"), "exclude_types", 100, 50
    )
    sanitized["tags"] = sanitize_array(arguments.get("tags"), "tags", 200, 50)
    sanitized["date_from"] = validate_timestamp(arguments.get("date_from"), "date_from")
    sanitized["date_to"] = validate_timestamp(arguments.get("date_to"), "date_to")
    sanitized["search_in"] = validate_enum(
        arguments.get("search_in"), "search_in", VALID_SEARCH_IN, "all"
    )
    sanitized["status"] = _optional_list(arguments, "status")
    sanitized["priority"] = _optional_list(arguments, "priority")
    sanitized["sentiment"] = _optional_list(arguments, "sentiment")
    sanitized["has_relationships"] = _optional_bool(
        arguments.get("has_relationships"), "has_relationships"
    )
    sanitized["sort"] = validate_enum(arguments.get("sort"), "sort", VALID_SORT_KEYS, "relevance")
    sanitized["group_by"] = validate_enum(
        arguments.get("group_by"), "group_by", VALID_GROUP_KEYS, "none"
    )
    sanitized["fuzzy"] = _optional_bool(arguments.get("fuzzy"), "fuzzy")
    sanitized["limit"] = int(validate_number(arguments.get("limit"), "limit", 1, 500, 20))
    return sanitized


def validate_memory_stats(arguments: Dict[str, Any]) -> Dict[str, Any]:
    return {}


def validate_memory_duplicates(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    threshold = arguments.get("threshold")
    if threshold is not None:
        sanitized["threshold"] = validate_number(threshold, "threshold", 0.0, 1.0)
    return sanitized


def validate_memory_highlight(arguments: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    sanitized["text"] = sanitize_string(
        arguments.get("text"), "text", max_length=100_000, required=False
    )
    sanitized["query"] = sanitize_string(arguments.get("query"), "query", 500, required=False)
    sanitized["open_tag"] = (
        sanitize_string(arguments.get("open_tag"), "open_tag", 50, required=False) or "<mark>"
    )
    sanitized["close_tag"] = (
        sanitize_string(arguments.get("close_tag"), "close_tag", 50, required=False) or "</mark>"
    )
    return sanitized


# =============================================================================
# HANDLERS
# =============================================================================


def handle_memory_search(
    args: Dict[str, Any], records: Sequence[MemoryRecord], now: int, config: SearchConfig
) -> str:
    search_filter = SearchFilter(
        query=args.get("query", ""),
        types=args.get("types", []),
        exclude_types=args.get("exclude_types", []),
        tags=args.get("tags", []),
        date_from=args.get("date_from"),
        date_to=args.get("date_to"),
        search_in=SearchIn(args.get("search_in", "all")),
        status=args.get("status"),
        priority=args.get("priority"),
        sentiment=args.get("sentiment"),
        has_relationships=args.get("has_relationships"),
    )
    if args.get("fuzzy") is not None:
        config = dataclasses.replace(config, use_fuzzy=args["fuzzy"])

    started = time.perf_counter()
    results = run_search(
        records,
        search_filter,
        sort_key=SortKey(args.get("sort", "relevance")),
        group_key=GroupKey(args.get("group_by", "none")),
        now=now,
        config=config,
    )
    log_search(
        search_filter.query,
        total=results.total_input,
        matched=results.count,
        sort=args.get("sort", "relevance"),
        group=args.get("group_by", "none"),
        duration_ms=(time.perf_counter() - started) * 1000,
    )

    limit = args.get("limit", 20)
    payload: Dict[str, Any] = {
        "query": search_filter.query,
        "total": results.total_input,
        "count": results.count,
        "results": records_to_dicts(results.records[:limit]),
    }
    if args.get("group_by", "none") != GroupKey.NONE.value:
        payload["groups"] = results.group_ids()
    return json.dumps(payload, indent=2, default=str, ensure_ascii=False)


def handle_memory_stats(
    args: Dict[str, Any], records: Sequence[MemoryRecord], now: int, config: SearchConfig
) -> str:
    started = time.perf_counter()
    stats = calculate_stats(records, now)
    log_stats(total=stats.total, duration_ms=(time.perf_counter() - started) * 1000)
    return json.dumps(stats.to_dict(), indent=2, ensure_ascii=False)


def handle_memory_duplicates(
    args: Dict[str, Any], records: Sequence[MemoryRecord], now: int, config: SearchConfig
) -> str:
    threshold = args.get("threshold", config.duplicate_threshold)
    started = time.perf_counter()
    clusters = find_duplicates(records, threshold)
    log_duplicates(
        total=len(records),
        clusters=len(clusters),
        threshold=threshold,
        duration_ms=(time.perf_counter() - started) * 1000,
    )
    return json.dumps(
        {
            "threshold": threshold,
            "clusters": [
                {
                    "head": {"id": c.head.id, "title": c.head.title},
                    "members": [{"id": m.id, "title": m.title} for m in c.members],
                }
                for c in clusters
            ],
        },
        indent=2,
        ensure_ascii=False,
    )


def handle_memory_highlight(
    args: Dict[str, Any], records: Sequence[MemoryRecord], now: int, config: SearchConfig
) -> str:
    return highlight_text(args["text"], args["query"], args["open_tag"], args["close_tag"])


HANDLERS: Dict[str, Callable[..., str]] = {
    "memory_search": handle_memory_search,
    "memory_stats": handle_memory_stats,
    "memory_duplicates": handle_memory_duplicates,
    "memory_highlight": handle_memory_highlight,
}

VALIDATORS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    "memory_search": validate_memory_search,
    "memory_stats": validate_memory_stats,
    "memory_duplicates": validate_memory_duplicates,
    "memory_highlight": validate_memory_highlight,
}

# Tools that never touch the record snapshot.
RECORDLESS_TOOLS = frozenset({"memory_highlight"})
