"""Stats command for the polaris CLI."""

import time
from typing import TYPE_CHECKING, List

from polaris.cli.commands.helpers import format_timestamp, print_json
from polaris.logging_config import log_stats
from polaris.search import calculate_stats
from polaris.types import MemoryRecord

if TYPE_CHECKING:
    from polaris.config import SearchConfig


def cmd_stats(args, records: List[MemoryRecord], now: int, config: "SearchConfig"):
    """Show aggregate statistics for the record set."""
    started = time.perf_counter()
    stats = calculate_stats(records, now)
    log_stats(total=stats.total, duration_ms=(time.perf_counter() - started) * 1000)

    if args.json:
        print_json(stats.to_dict())
        return

    if stats.total == 0:
        print("No records.")
        return

    ranges = stats.by_time_range
    print("Memory Statistics")
    print("=" * 40)
    print(f"Total records:     {stats.total}")
    print(f"Oldest:            {format_timestamp(stats.oldest_memory)}")
    print(f"Newest:            {format_timestamp(stats.newest_memory)}")
    print(f"Average per day:   {stats.average_per_day}")
    print(f"Most active day:   {stats.most_active_day}")
    print()
    print("Activity:")
    print(f"  Last 24 hours:   {ranges.last_24h}")
    print(f"  Last 7 days:     {ranges.last_7d}")
    print(f"  Last 30 days:    {ranges.last_30d}")
    print(f"  Last 365 days:   {ranges.last_365d}")
    print()
    print("By type:")
    for type_name, count in sorted(stats.by_type.items(), key=lambda kv: (-kv[1], kv[0])):
        print(f"  {type_name}: {count}")

    if stats.by_tag:
        top = sorted(stats.by_tag.items(), key=lambda kv: (-kv[1], kv[0]))[: args.top_tags]
        print()
        print(f"Top tags ({len(top)} of {len(stats.by_tag)}):")
        for tag, count in top:
            print(f"  #{tag}: {count}")
