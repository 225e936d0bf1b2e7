"""Single-pass aggregate statistics over a record set."""

from datetime import timezone
from typing import Dict, Sequence

from polaris.types import DAY_MS, MemoryRecord, MemoryStats, safe_ms_to_datetime

_WINDOWS = (
    ("last_24h", 1 * DAY_MS),
    ("last_7d", 7 * DAY_MS),
    ("last_30d", 30 * DAY_MS),
    ("last_365d", 365 * DAY_MS),
)


def calculate_stats(records: Sequence[MemoryRecord], now: int, tz=timezone.utc) -> MemoryStats:
    """Compute counts, activity windows and date extremes for *records*.

    Args:
        records: Records to summarize.
        now: Reference time in epoch milliseconds.
        tz: Timezone that defines a calendar day for ``most_active_day``.

    Returns:
        MemoryStats. For an empty input every count is 0, the timestamps
        are 0 and ``most_active_day`` is empty.
    """
    stats = MemoryStats(total=len(records))
    if not records:
        return stats

    window_counts = {name: 0 for name, _ in _WINDOWS}
    day_activity: Dict[str, int] = {}
    oldest = records[0].created_at
    newest = records[0].created_at

    for record in records:
        created = record.created_at
        stats.by_type[record.type] = stats.by_type.get(record.type, 0) + 1
        for tag in record.tags:
            stats.by_tag[tag] = stats.by_tag.get(tag, 0) + 1

        for name, span in _WINDOWS:
            if created >= now - span:
                window_counts[name] += 1

        created_dt = safe_ms_to_datetime(created, tz)
        # Timestamps beyond datetime's range still count but have no calendar day.
        if created_dt is not None:
            day = created_dt.date().isoformat()
            day_activity[day] = day_activity.get(day, 0) + 1

        oldest = min(oldest, created)
        newest = max(newest, created)

    for name, count in window_counts.items():
        setattr(stats.by_time_range, name, count)

    stats.oldest_memory = oldest
    stats.newest_memory = newest

    day_span = max(1, (now - oldest) // DAY_MS)
    stats.average_per_day = round(len(records) / day_span, 2)

    # max() keeps the first key on ties, and dicts preserve first-seen order.
    if day_activity:
        stats.most_active_day = max(day_activity, key=day_activity.__getitem__)
    return stats
