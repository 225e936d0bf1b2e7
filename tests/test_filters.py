"""Tests for polaris.search.filters."""

import random

import pytest
from conftest import NOW, build_record

from polaris.search.filters import filter_memories, matches_query, search_text
from polaris.search.query import parse_boolean_query
from polaris.types import DAY_MS, SearchFilter, SearchIn

TYPES = ["Journal entry", "Agenda task", "Person", "Concept", "Goal"]
TAGS = ["work", "home", "ideas", "health"]


def _random_records(seed, count=40):
    rng = random.Random(seed)
    return [
        build_record(
            id=f"r{i}",
            type=rng.choice(TYPES),
            title=f"record {i}",
            created_at=NOW - rng.randint(0, 500) * DAY_MS,
            tags=rng.sample(TAGS, rng.randint(0, 2)),
        )
        for i in range(count)
    ]


class TestSearchText:
    """Field selection for the text query."""

    def test_all_includes_type_and_tags(self, make_record):
        r = make_record(title="T", content="C", type="Goal", tags=["x", "y"])
        assert search_text(r, SearchIn.ALL) == "T C Goal x y"

    def test_title_and_content_only(self, make_record):
        r = make_record(title="T", content="C")
        assert search_text(r, SearchIn.TITLE) == "T"
        assert search_text(r, SearchIn.CONTENT) == "C"


class TestMatchesQuery:
    """Boolean evaluation."""

    def test_excluded_term_rejects(self):
        q = parse_boolean_query("project -draft")
        assert not matches_query("Draft project", q)
        assert matches_query("Project plan", q)

    def test_required_terms_all_needed(self):
        q = parse_boolean_query("+alpha +beta")
        assert matches_query("alpha and beta", q, use_fuzzy=False)
        assert not matches_query("alpha only", q, use_fuzzy=False)

    def test_optional_needs_one(self):
        q = parse_boolean_query("alpha beta")
        assert matches_query("beta", q, use_fuzzy=False)
        assert not matches_query("gamma", q, use_fuzzy=False)

    def test_exact_phrase_case_insensitive(self):
        q = parse_boolean_query('"Exact Phrase"')
        assert matches_query("an exact phrase here", q)
        assert not matches_query("exact other phrase", q)

    def test_fuzzy_toggle(self):
        q = parse_boolean_query("meetng")
        assert matches_query("meeting", q, use_fuzzy=True)
        assert not matches_query("meeting", q, use_fuzzy=False)

    def test_only_excluded_terms_keeps_non_matching(self):
        q = parse_boolean_query("-secret")
        assert matches_query("public notes", q)
        assert not matches_query("Secret notes", q)


class TestFilterMemories:
    """Pipeline filtering."""

    def test_none_filter_returns_copy(self, sample_records):
        result = filter_memories(sample_records)
        assert result == sample_records
        assert result is not sample_records

    def test_default_filter_is_identity(self, sample_records):
        assert filter_memories(sample_records, SearchFilter()) == sample_records

    def test_empty_input(self):
        assert filter_memories([], SearchFilter(query="anything")) == []

    def test_type_include_and_exclude(self, sample_records):
        included = filter_memories(sample_records, SearchFilter(types=["Person", "Concept"]))
        assert [r.id for r in included] == ["p1", "c1"]
        excluded = filter_memories(sample_records, SearchFilter(exclude_types=["Person"]))
        assert "p1" not in [r.id for r in excluded]
        assert len(excluded) == len(sample_records) - 1

    def test_tag_intersection(self, sample_records):
        result = filter_memories(sample_records, SearchFilter(tags=["launch", "ideas"]))
        assert [r.id for r in result] == ["d1", "c1"]

    def test_date_range_inclusive(self, make_record):
        records = [
            make_record(id="before", created_at=999),
            make_record(id="start", created_at=1000),
            make_record(id="end", created_at=2000),
            make_record(id="after", created_at=2001),
        ]
        result = filter_memories(records, SearchFilter(date_from=1000, date_to=2000))
        assert [r.id for r in result] == ["start", "end"]

    def test_status_filter_rejects_missing_status(self, sample_records):
        result = filter_memories(sample_records, SearchFilter(status=["pending", "in-progress"]))
        assert [r.id for r in result] == ["a1", "d1"]

    def test_priority_and_sentiment(self, sample_records):
        assert [r.id for r in filter_memories(sample_records, SearchFilter(priority=["high"]))] == ["a1"]
        assert [
            r.id for r in filter_memories(sample_records, SearchFilter(sentiment=["positive"]))
        ] == ["j1"]

    def test_empty_status_list_is_no_constraint(self, sample_records):
        assert filter_memories(sample_records, SearchFilter(status=[])) == sample_records

    def test_relationship_flag(self, sample_records):
        related = filter_memories(sample_records, SearchFilter(has_relationships=True))
        assert [r.id for r in related] == ["a1", "p1"]
        unrelated = filter_memories(sample_records, SearchFilter(has_relationships=False))
        assert [r.id for r in unrelated] == ["j1", "d1", "c1"]

    def test_search_in_title_only(self, sample_records):
        result = filter_memories(
            sample_records, SearchFilter(query="milestones", search_in=SearchIn.TITLE)
        )
        assert result == []
        result = filter_memories(
            sample_records, SearchFilter(query="milestones", search_in=SearchIn.CONTENT)
        )
        assert [r.id for r in result] == ["a1"]

    def test_query_matches_tags_in_all_fields(self, sample_records):
        result = filter_memories(sample_records, SearchFilter(query="reflection"), use_fuzzy=False)
        assert [r.id for r in result] == ["j1"]

    def test_project_minus_draft(self, make_record):
        records = [
            make_record(id="1", title="project plan"),
            make_record(id="2", title="draft project"),
        ]
        result = filter_memories(records, SearchFilter(query="project -draft"))
        assert [r.title for r in result] == ["project plan"]

    def test_exact_phrase_only_literal_matches(self, make_record):
        records = [
            make_record(id="1", content="This has the Exact Phrase inside"),
            make_record(id="2", content="exact words, but no phrase"),
            make_record(id="3", content="EXACT PHRASE shouting"),
        ]
        result = filter_memories(records, SearchFilter(query='"exact phrase"'))
        assert [r.id for r in result] == ["1", "3"]

    def test_operator_only_query_keeps_everything(self, sample_records):
        assert filter_memories(sample_records, SearchFilter(query="AND OR")) == sample_records

    def test_does_not_mutate_input(self, sample_records):
        before = list(sample_records)
        filter_memories(sample_records, SearchFilter(types=["Person"]))
        assert sample_records == before

    @pytest.mark.parametrize("seed", [1, 2, 3, 4])
    def test_type_filter_property(self, seed):
        records = _random_records(seed)
        wanted = random.Random(seed).sample(TYPES, 2)
        result = filter_memories(records, SearchFilter(types=wanted))
        assert len(result) <= len(records)
        assert all(r.type in wanted for r in result)

    @pytest.mark.parametrize("seed", [5, 6])
    def test_output_is_ordered_subsequence(self, seed):
        records = _random_records(seed)
        result = filter_memories(records, SearchFilter(tags=["work", "ideas"]))
        positions = [records.index(r) for r in result]
        assert positions == sorted(positions)
