"""Tests for polaris.search.stats."""

from datetime import timedelta, timezone

import pytest
from conftest import NOW

from polaris.search.stats import calculate_stats
from polaris.types import DAY_MS, HOUR_MS


class TestCalculateStats:
    """Aggregate statistics."""

    def test_empty_input(self):
        stats = calculate_stats([], NOW)
        assert stats.total == 0
        assert stats.average_per_day == 0
        assert stats.oldest_memory == 0
        assert stats.newest_memory == 0
        assert stats.most_active_day == ""
        assert stats.by_type == {} and stats.by_tag == {}
        assert stats.by_time_range.last_365d == 0

    def test_counts_by_type_and_tag(self, sample_records):
        stats = calculate_stats(sample_records, NOW)
        assert stats.total == 5
        assert stats.by_type["Journal entry"] == 1
        assert stats.by_tag == {"writing": 1, "reflection": 1, "work": 2, "launch": 1, "ideas": 1}

    def test_time_windows(self, sample_records):
        ranges = calculate_stats(sample_records, NOW).by_time_range
        assert ranges.last_24h == 1
        assert ranges.last_7d == 2
        assert ranges.last_30d == 3
        assert ranges.last_365d == 4

    def test_window_bounds_are_inclusive(self, make_record):
        r = make_record(created_at=NOW - DAY_MS)
        assert calculate_stats([r], NOW).by_time_range.last_24h == 1

    def test_oldest_newest_and_average(self, sample_records):
        stats = calculate_stats(sample_records, NOW)
        assert stats.oldest_memory == NOW - 400 * DAY_MS
        assert stats.newest_memory == NOW - 2 * HOUR_MS
        assert stats.average_per_day == round(5 / 400, 2)

    def test_average_uses_at_least_one_day(self, make_record):
        stats = calculate_stats([make_record(id="a"), make_record(id="b")], NOW)
        assert stats.average_per_day == 2.0

    def test_most_active_day(self, make_record):
        records = [
            make_record(id="1", created_at=NOW - 3 * DAY_MS),
            make_record(id="2", created_at=NOW),
            make_record(id="3", created_at=NOW - HOUR_MS),
        ]
        assert calculate_stats(records, NOW).most_active_day == "2026-03-15"

    def test_most_active_day_tie_keeps_first_seen(self, make_record):
        records = [
            make_record(id="1", created_at=NOW - 3 * DAY_MS),
            make_record(id="2", created_at=NOW),
        ]
        assert calculate_stats(records, NOW).most_active_day == "2026-03-12"

    def test_most_active_day_respects_timezone(self, make_record):
        # 2026-03-15T12:00Z is already the 16th at UTC+13
        tz = timezone(timedelta(hours=13))
        assert calculate_stats([make_record(created_at=NOW)], NOW, tz=tz).most_active_day == "2026-03-16"

    def test_out_of_range_timestamp_has_no_day(self, make_record):
        stats = calculate_stats([make_record(created_at=10**15)], NOW)
        assert stats.total == 1
        assert stats.newest_memory == 10**15
        assert stats.most_active_day == ""

    def test_out_of_range_timestamp_skipped_for_active_day(self, make_record):
        records = [make_record(id="bad", created_at=-(10**15)), make_record(id="ok", created_at=NOW)]
        stats = calculate_stats(records, NOW)
        assert stats.most_active_day == "2026-03-15"
        assert stats.oldest_memory == -(10**15)

    def test_to_dict(self, sample_records):
        data = calculate_stats(sample_records, NOW).to_dict()
        assert data["total"] == 5
        assert set(data["by_time_range"]) == {"last_24h", "last_7d", "last_30d", "last_365d"}

    @pytest.mark.parametrize("count", [1, 10, 50])
    def test_total_matches_input(self, make_record, count):
        records = [make_record(id=str(i), created_at=NOW - i * DAY_MS) for i in range(count)]
        stats = calculate_stats(records, NOW)
        assert stats.total == count
        assert sum(stats.by_type.values()) == count
