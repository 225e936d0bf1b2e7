"""Tests for duplicate detection."""

import random

import pytest
from conftest import build_record

from polaris.search.dedup import find_duplicates, normalize_title


def test_normalize_title():
    assert normalize_title("  Meeting   WITH\tJohn ") == "meeting with john"


class TestFindDuplicates:
    """Clustering by title similarity."""

    def test_meeting_scenario(self, make_record):
        records = [
            make_record(id="1", title="Meeting with John"),
            make_record(id="2", title="Meeting with Jon"),
        ]
        clusters = find_duplicates(records, 0.85)
        assert len(clusters) == 1
        assert clusters[0].head.id == "1"
        assert clusters[0].ids == ["1", "2"]

    def test_whitespace_and_case_ignored(self, make_record):
        records = [make_record(id="1", title="Weekly Review"), make_record(id="2", title="weekly  review ")]
        assert len(find_duplicates(records)) == 1

    def test_unique_records_omitted(self, make_record):
        records = [
            make_record(id="1", title="Groceries"),
            make_record(id="2", title="Quarterly taxes"),
        ]
        assert find_duplicates(records) == []

    def test_first_match_wins(self, make_record):
        records = [
            make_record(id="a", title="plan v1"),
            make_record(id="b", title="plan v2"),
            make_record(id="c", title="plan v3"),
        ]
        clusters = find_duplicates(records, 0.8)
        assert len(clusters) == 1
        assert clusters[0].ids == ["a", "b", "c"]

    def test_threshold_clamped(self, make_record):
        records = [make_record(id="1", title="abc"), make_record(id="2", title="xyz")]
        assert len(find_duplicates(records, threshold=-1)) == 1
        assert find_duplicates(records, threshold=5) == []

    def test_empty_input(self):
        assert find_duplicates([]) == []

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_no_record_in_two_clusters(self, seed):
        rng = random.Random(seed)
        stems = ["standup notes", "weekly review", "call mom", "gym"]
        records = [
            build_record(id=f"r{i}", title=rng.choice(stems) + rng.choice(["", "s", " 2", "!"]))
            for i in range(40)
        ]
        clusters = find_duplicates(records, 0.8)
        seen = [rid for cluster in clusters for rid in cluster.ids]
        assert len(seen) == len(set(seen))
