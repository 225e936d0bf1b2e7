"""Multi-dimensional record filtering.

``filter_memories`` narrows a record list stage by stage. Each stage keeps
the relative input order, so the output is a stable subsequence of the
input. Stages with an empty constraint are skipped entirely.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence

from polaris.config import DEFAULT_FUZZY_THRESHOLD
from polaris.search.fuzzy import clamp_threshold, fuzzy_match
from polaris.search.query import parse_boolean_query
from polaris.types import BooleanQuery, MemoryRecord, SearchFilter, SearchIn

logger = logging.getLogger(__name__)

Predicate = Callable[[MemoryRecord], bool]


def search_text(record: MemoryRecord, search_in: SearchIn) -> str:
    """The text a query is matched against for *search_in*."""
    if search_in == SearchIn.TITLE:
        return record.title
    if search_in == SearchIn.CONTENT:
        return record.content
    return " ".join([record.title, record.content, record.type, *record.tags])


def matches_query(
    text: str,
    query: BooleanQuery,
    use_fuzzy: bool = True,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> bool:
    """Evaluate a parsed boolean query against *text*."""
    lower = text.lower()

    def term_matches(term: str) -> bool:
        if use_fuzzy:
            return fuzzy_match(term, text, threshold)
        return term in lower

    if any(term in lower for term in query.excluded):
        return False
    if not all(phrase.lower() in lower for phrase in query.exact):
        return False
    if not all(term_matches(term) for term in query.required):
        return False
    if query.optional:
        return any(term_matches(term) for term in query.optional)
    return True


def _in_list(value: Optional[str], allowed: Optional[Sequence[str]]) -> bool:
    return value is not None and value in allowed


def _stages(
    search_filter: SearchFilter, use_fuzzy: bool, threshold: float
) -> Iterable[Predicate]:
    f = search_filter
    if f.types:
        types = set(f.types)
        yield lambda r: r.type in types
    if f.exclude_types:
        excluded = set(f.exclude_types)
        yield lambda r: r.type not in excluded
    if f.tags:
        wanted = set(f.tags)
        yield lambda r: any(tag in wanted for tag in r.tags)
    if f.date_from is not None:
        yield lambda r: r.created_at >= f.date_from
    if f.date_to is not None:
        yield lambda r: r.created_at <= f.date_to
    if f.status:
        yield lambda r: _in_list(r.status, f.status)
    if f.priority:
        yield lambda r: _in_list(r.priority, f.priority)
    if f.sentiment:
        yield lambda r: _in_list(r.sentiment, f.sentiment)
    if f.has_relationships is not None:
        yield lambda r: r.has_relationships == f.has_relationships
    if f.query and f.query.strip():
        parsed = parse_boolean_query(f.query)
        if not parsed.is_empty:
            yield lambda r: matches_query(
                search_text(r, f.search_in), parsed, use_fuzzy, threshold
            )


def filter_memories(
    records: Sequence[MemoryRecord],
    search_filter: Optional[SearchFilter] = None,
    use_fuzzy: bool = True,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> List[MemoryRecord]:
    """Return the records that satisfy every constraint in *search_filter*.

    Args:
        records: Input snapshot; never mutated.
        search_filter: Constraints. ``None`` or a default filter returns
            a copy of *records*.
        use_fuzzy: Match required/optional terms with the fuzzy matcher
            instead of plain substring containment.
        threshold: Fuzzy similarity threshold, clamped to [0, 1].

    Returns:
        A new list preserving input order.
    """
    results = list(records)
    if search_filter is None:
        return results

    threshold = clamp_threshold(threshold)
    for stage in _stages(search_filter, use_fuzzy, threshold):
        results = [r for r in results if stage(r)]
        if not results:
            break

    logger.debug("filter_memories: %d -> %d records", len(records), len(results))
    return results
