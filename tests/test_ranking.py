"""Tests for polaris.search.ranking."""

import random

import pytest
from conftest import NOW, build_record

from polaris.config import RelevanceWeights
from polaris.search.ranking import relevance_score, sort_memories
from polaris.types import DAY_MS, SortKey


def _records_with_ties(seed, count=30):
    rng = random.Random(seed)
    return [
        build_record(
            id=f"r{i}",
            type=rng.choice(["Goal", "goal", "Person", "Agenda task"]),
            title=rng.choice(["alpha", "Alpha", "beta", "gamma plan"]),
            content=rng.choice(["", "plan", "plan plan"]),
            created_at=NOW - rng.randint(0, 5) * DAY_MS,
        )
        for i in range(count)
    ]


class TestRelevanceScore:
    """Heuristic scoring."""

    def test_exact_title_beats_substring(self, make_record):
        exact = make_record(title="Plan", created_at=0)
        partial = make_record(title="Project plan", created_at=0)
        assert relevance_score(exact, "plan") == 100
        assert relevance_score(partial, "plan") == 50

    def test_components_add_up(self, make_record):
        r = make_record(
            title="other",
            content="plan the plan, then PLAN",
            type="Planning",
            tags=["planning", "plan", "misc"],
            created_at=0,
        )
        # 3 content occurrences, 2 tags, type substring
        assert relevance_score(r, "plan") == 3 * 5 + 2 * 10 + 15

    def test_recency_bonus_requires_now(self, make_record):
        r = make_record(title="x", created_at=NOW - 2 * DAY_MS)
        assert relevance_score(r, "zzz") == 0
        assert relevance_score(r, "zzz", now=NOW) == 10

    @pytest.mark.parametrize(
        "age_days, bonus",
        [(0, 10), (6.9, 10), (7, 5), (29.9, 5), (30, 0), (365, 0)],
    )
    def test_recency_bands(self, make_record, age_days, bonus):
        r = make_record(title="x", created_at=NOW - int(age_days * DAY_MS))
        assert relevance_score(r, "zzz", now=NOW) == bonus

    def test_blank_query_scores_zero(self, make_record):
        assert relevance_score(make_record(title="plan"), "  ", now=NOW) == 0

    def test_custom_weights(self, make_record):
        weights = RelevanceWeights(title_exact=1, content_occurrence=0)
        r = make_record(title="plan", content="plan")
        assert relevance_score(r, "plan", weights=weights) == 1


class TestSortMemories:
    """Ordering by each sort key."""

    def test_relevance_orders_by_score(self, make_record):
        records = [
            make_record(id="low", title="unrelated", content="plan", created_at=0),
            make_record(id="high", title="plan", created_at=0),
            make_record(id="mid", title="a plan", created_at=0),
        ]
        ordered = sort_memories(records, SortKey.RELEVANCE, query="plan")
        assert [r.id for r in ordered] == ["high", "mid", "low"]

    def test_relevance_without_query_falls_back_to_date_desc(self, sample_records):
        shuffled = list(reversed(sample_records))
        assert sort_memories(shuffled, "relevance") == sort_memories(shuffled, "date-desc")

    def test_date_orders(self, sample_records):
        desc = sort_memories(sample_records, SortKey.DATE_DESC)
        asc = sort_memories(sample_records, SortKey.DATE_ASC)
        assert [r.created_at for r in desc] == sorted((r.created_at for r in desc), reverse=True)
        assert [r.id for r in asc] == [r.id for r in reversed(desc)]

    def test_title_order(self, make_record):
        records = [make_record(id=t, title=t) for t in ["beta", "Alpha", "alpha", "Beta"]]
        assert [r.title for r in sort_memories(records, "title")] == [
            "Alpha",
            "alpha",
            "Beta",
            "beta",
        ]

    def test_type_order_breaks_ties_by_newest(self, make_record):
        records = [
            make_record(id="g-old", type="Goal", created_at=1),
            make_record(id="c", type="Concept", created_at=5),
            make_record(id="g-new", type="Goal", created_at=9),
        ]
        assert [r.id for r in sort_memories(records, "type")] == ["c", "g-new", "g-old"]

    def test_invalid_sort_key(self, sample_records):
        with pytest.raises(ValueError):
            sort_memories(sample_records, "bogus")

    def test_empty_input(self):
        assert sort_memories([], SortKey.RELEVANCE, query="x") == []

    @pytest.mark.parametrize("key", list(SortKey))
    @pytest.mark.parametrize("seed", [1, 2])
    def test_idempotent(self, key, seed):
        records = _records_with_ties(seed)
        once = sort_memories(records, key, query="plan", now=NOW)
        assert sort_memories(once, key, query="plan", now=NOW) == once

    @pytest.mark.parametrize("seed", [3, 4])
    def test_stable_for_equal_keys(self, seed):
        records = _records_with_ties(seed)
        ordered = sort_memories(records, SortKey.DATE_DESC)
        for created_at in {r.created_at for r in records}:
            expected = [r.id for r in records if r.created_at == created_at]
            assert [r.id for r in ordered if r.created_at == created_at] == expected

    def test_does_not_mutate_input(self, sample_records):
        before = list(sample_records)
        sort_memories(sample_records, SortKey.TITLE)
        assert sample_records == before
