"""Duplicates command for the polaris CLI."""

import time
from typing import TYPE_CHECKING, List

from polaris.cli.commands.helpers import format_timestamp, print_json
from polaris.logging_config import log_duplicates
from polaris.search import find_duplicates
from polaris.search.fuzzy import clamp_threshold
from polaris.types import MemoryRecord

if TYPE_CHECKING:
    from polaris.config import SearchConfig


def cmd_duplicates(args, records: List[MemoryRecord], now: int, config: "SearchConfig"):
    """List clusters of records with near-identical titles."""
    threshold = config.duplicate_threshold
    if args.threshold is not None:
        threshold = clamp_threshold(args.threshold, config.duplicate_threshold)

    started = time.perf_counter()
    clusters = find_duplicates(records, threshold)
    log_duplicates(
        total=len(records),
        clusters=len(clusters),
        threshold=threshold,
        duration_ms=(time.perf_counter() - started) * 1000,
    )

    if args.json:
        print_json(
            {
                "threshold": threshold,
                "clusters": [
                    {"head": c.head.id, "members": [m.id for m in c.members]} for c in clusters
                ],
            }
        )
        return

    if not clusters:
        print(f"No duplicates found (threshold {threshold:.2f}).")
        return

    print(f"Found {len(clusters)} duplicate cluster(s) (threshold {threshold:.2f}):\n")
    for i, cluster in enumerate(clusters, 1):
        head = cluster.head
        print(f"{i}. {head.title}  [{head.type}] {format_timestamp(head.created_at)}  id={head.id}")
        for member in cluster.members:
            print(
                f"   ~ {member.title}  [{member.type}] "
                f"{format_timestamp(member.created_at)}  id={member.id}"
            )
        print()
