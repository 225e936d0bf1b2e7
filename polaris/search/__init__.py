"""In-memory search engine: parsing, matching, filtering, ranking, grouping,
statistics and duplicate detection.

Everything here is pure and synchronous; time-relative functions take
``now`` explicitly.
"""

from polaris.search.dedup import find_duplicates, normalize_title
from polaris.search.filters import filter_memories, matches_query, search_text
from polaris.search.fuzzy import clamp_threshold, fuzzy_match, levenshtein_distance, similarity
from polaris.search.grouping import date_group_label, group_label, group_memories
from polaris.search.pipeline import SearchResults, run_saved_query, run_search
from polaris.search.query import highlight_text, parse_boolean_query
from polaris.search.ranking import relevance_score, sort_memories
from polaris.search.stats import calculate_stats

__all__ = [
    "SearchResults",
    "calculate_stats",
    "clamp_threshold",
    "date_group_label",
    "filter_memories",
    "find_duplicates",
    "fuzzy_match",
    "group_label",
    "group_memories",
    "highlight_text",
    "levenshtein_distance",
    "matches_query",
    "normalize_title",
    "parse_boolean_query",
    "relevance_score",
    "run_saved_query",
    "run_search",
    "search_text",
    "similarity",
    "sort_memories",
]
