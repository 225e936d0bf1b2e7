"""Bucket ranked results for display.

Buckets are insertion-ordered dicts; records inside a bucket keep the
order they arrived in, which is the ranker's output order.
"""

from datetime import timezone
from typing import Dict, List, Optional, Sequence

from polaris.types import DAY_MS, GroupKey, MemoryRecord, safe_ms_to_datetime

ALL_RESULTS = "All Results"
NO_STATUS = "No Status"
NO_PRIORITY = "No Priority"
# Records too old for a calendar year to be computed.
OLDER = "Older"

# Tag grouping keys the untagged bucket by None so no real tag can land in it.
UNTAGGED = None
UNTAGGED_LABEL = "Untagged"

# (label, exclusive upper bound in whole days)
DATE_BUCKETS = [
    ("Today", 1),
    ("Yesterday", 2),
    ("This Week", 7),
    ("This Month", 30),
    ("Last 3 Months", 90),
    ("This Year", 365),
]


def group_label(key: Optional[str]) -> str:
    """Display label for a bucket key."""
    return UNTAGGED_LABEL if key is UNTAGGED else key


def date_group_label(created_at: int, now: int, tz=timezone.utc) -> str:
    """Relative date bucket for *created_at*; records a year or older get their calendar year."""
    days = (now - created_at) // DAY_MS
    if days < 0:
        return "Today"
    for label, upper in DATE_BUCKETS:
        if days < upper:
            return label
    created = safe_ms_to_datetime(created_at, tz)
    return str(created.year) if created is not None else OLDER


def _group_by_date(
    records: Sequence[MemoryRecord], now: int, tz
) -> Dict[str, List[MemoryRecord]]:
    found: Dict[str, List[MemoryRecord]] = {}
    for record in records:
        found.setdefault(date_group_label(record.created_at, now, tz), []).append(record)

    groups: Dict[str, List[MemoryRecord]] = {}
    for label, _ in DATE_BUCKETS:
        if label in found:
            groups[label] = found.pop(label)
    older = found.pop(OLDER, None)
    for year in sorted(found, key=int, reverse=True):
        groups[year] = found[year]
    if older is not None:
        groups[OLDER] = older
    return groups


def group_memories(
    records: Sequence[MemoryRecord],
    group_key: GroupKey = GroupKey.NONE,
    now: Optional[int] = None,
    tz=timezone.utc,
) -> Dict[Optional[str], List[MemoryRecord]]:
    """Partition *records* into named buckets.

    Args:
        records: Ranked records.
        group_key: One of ``GroupKey`` (string values accepted).
        now: Reference time; required for ``date`` grouping.
        tz: Timezone used to name year buckets.

    Returns:
        Buckets keyed by label. Tag grouping puts untagged records under
        the ``UNTAGGED`` key; use ``group_label`` to display it.

    Raises:
        ValueError: If ``date`` grouping is requested without *now*.
    """
    group_key = GroupKey(group_key)

    if group_key == GroupKey.NONE:
        return {ALL_RESULTS: list(records)}

    if group_key == GroupKey.DATE:
        if now is None:
            raise ValueError("date grouping requires 'now'")
        return _group_by_date(records, now, tz)

    groups: Dict[Optional[str], List[MemoryRecord]] = {}
    for record in records:
        if group_key == GroupKey.TAGS:
            for tag in record.tags or (UNTAGGED,):
                bucket = groups.setdefault(tag, [])
                # A repeated tag on one record still yields a single membership.
                if not bucket or bucket[-1] is not record:
                    bucket.append(record)
            continue

        if group_key == GroupKey.TYPE:
            label = record.type
        elif group_key == GroupKey.STATUS:
            label = record.status or NO_STATUS
        else:
            label = record.priority or NO_PRIORITY
        groups.setdefault(label, []).append(record)

    return groups
