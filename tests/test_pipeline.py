"""Tests for the filter -> rank -> group pipeline."""

import logging

from conftest import NOW

from polaris.config import SearchConfig
from polaris.search.pipeline import run_saved_query, run_search
from polaris.types import GroupKey, SavedQuery, SearchFilter, SortKey


class TestRunSearch:
    """End-to-end pipeline."""

    def test_defaults_return_everything_newest_first(self, sample_records):
        results = run_search(list(reversed(sample_records)))
        assert [r.id for r in results.records] == [r.id for r in sample_records]
        assert results.total_input == 5
        assert results.count == 5
        assert list(results.groups) == ["All Results"]

    def test_query_sorted_by_relevance(self, sample_records):
        results = run_search(sample_records, SearchFilter(query="project"), now=NOW)
        assert [r.id for r in results.records] == ["a1", "j1"]

    def test_grouping_by_type(self, sample_records):
        results = run_search(
            sample_records,
            SearchFilter(tags=["work"]),
            sort_key=SortKey.DATE_ASC,
            group_key=GroupKey.TYPE,
        )
        assert [r.id for r in results.records] == ["d1", "a1"]
        assert list(results.groups) == ["Deliverable", "Agenda task"]

    def test_config_disables_fuzzy(self, make_record):
        records = [make_record(id="1", title="meeting")]
        fuzzy = run_search(records, SearchFilter(query="meetng"))
        exact = run_search(records, SearchFilter(query="meetng"), config=SearchConfig(use_fuzzy=False))
        assert fuzzy.count == 1
        assert exact.count == 0

    def test_date_grouping_with_now(self, sample_records):
        results = run_search(sample_records, group_key=GroupKey.DATE, now=NOW)
        assert list(results.groups)[0] == "Today"

    def test_date_grouping_without_now_is_ungrouped(self, sample_records, caplog):
        with caplog.at_level(logging.WARNING, logger="polaris"):
            results = run_search(sample_records, group_key="date")
        assert list(results.groups) == ["All Results"]
        assert results.count == len(sample_records)
        assert "without a reference time" in caplog.text

    def test_group_ids_label_untagged_bucket(self, make_record):
        records = [make_record(id="a", tags=[]), make_record(id="b", tags=["Untagged"])]
        results = run_search(records, sort_key=SortKey.TITLE, group_key=GroupKey.TAGS)
        assert sorted(results.group_ids(), key=lambda g: g["ids"]) == [
            {"group": "Untagged", "ids": ["a"]},
            {"group": "Untagged", "ids": ["b"]},
        ]


class TestRunSavedQuery:
    """Saved queries re-run against fresh snapshots."""

    def test_round_trips_through_dict(self, sample_records):
        saved = SavedQuery(
            id="q1",
            name="Open work",
            filter=SearchFilter(tags=["work"], status=["pending"]),
            sort=SortKey.TITLE,
            group_by=GroupKey.PRIORITY,
            created_at=NOW,
        )
        restored = SavedQuery.from_dict(saved.to_dict())
        results = run_saved_query(sample_records, restored, now=NOW)
        assert [r.id for r in results.records] == ["a1"]
        assert list(results.groups) == ["high"]

    def test_picks_up_new_records(self, sample_records, make_record):
        saved = SavedQuery(id="q", name="ideas", filter=SearchFilter(tags=["ideas"]))
        first = run_saved_query(sample_records, saved)
        fresh = sample_records + [make_record(id="new", tags=["ideas"])]
        second = run_saved_query(fresh, saved)
        assert second.count == first.count + 1
