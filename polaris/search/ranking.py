"""Result ordering.

Each sort key maps to a total key function, and every call performs one
stable ``sorted()`` pass. Records with equal keys keep their input order,
which makes sorting idempotent.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from polaris.config import DEFAULT_WEIGHTS, RelevanceWeights
from polaris.types import DAY_MS, MemoryRecord, SortKey

logger = logging.getLogger(__name__)


def relevance_score(
    record: MemoryRecord,
    query: str,
    now: Optional[int] = None,
    weights: RelevanceWeights = DEFAULT_WEIGHTS,
) -> int:
    """Heuristic relevance of *record* for the raw *query* string.

    The recency bonus is only applied when *now* is given.
    """
    q = query.strip().lower()
    if not q:
        return 0

    score = 0
    title = record.title.lower()
    if title == q:
        score += weights.title_exact
    elif q in title:
        score += weights.title_contains

    score += record.content.lower().count(q) * weights.content_occurrence
    score += sum(1 for tag in record.tags if q in tag.lower()) * weights.tag_match

    if q in record.type.lower():
        score += weights.type_match

    if now is not None:
        age_days = (now - record.created_at) / DAY_MS
        if age_days < 7:
            score += weights.recent_week
        elif age_days < 30:
            score += weights.recent_month

    return score


def _title_key(record: MemoryRecord) -> Tuple[str, str]:
    return (record.title.casefold(), record.title)


def _type_key(record: MemoryRecord) -> Tuple[str, str, int]:
    return (record.type.casefold(), record.type, -record.created_at)


def sort_memories(
    records: Sequence[MemoryRecord],
    sort_key: SortKey = SortKey.RELEVANCE,
    query: Optional[str] = None,
    now: Optional[int] = None,
    weights: Optional[RelevanceWeights] = None,
) -> List[MemoryRecord]:
    """Return a new list of *records* ordered by *sort_key*.

    Args:
        records: Input snapshot; never mutated.
        sort_key: One of ``SortKey`` (string values accepted).
        query: Raw query text, used only for ``relevance``. Without a
            non-blank query, ``relevance`` falls back to ``date-desc``.
        now: Reference time for the relevance recency bonus.
        weights: Relevance weight table; defaults to ``DEFAULT_WEIGHTS``.
    """
    sort_key = SortKey(sort_key)
    weights = weights or DEFAULT_WEIGHTS

    key: Callable[[MemoryRecord], Any]
    if sort_key == SortKey.RELEVANCE and query and query.strip():
        key = lambda r: -relevance_score(r, query, now, weights)  # noqa: E731
    elif sort_key in (SortKey.RELEVANCE, SortKey.DATE_DESC):
        key = lambda r: -r.created_at  # noqa: E731
    elif sort_key == SortKey.DATE_ASC:
        key = lambda r: r.created_at  # noqa: E731
    elif sort_key == SortKey.TITLE:
        key = _title_key
    else:
        key = _type_key

    return sorted(records, key=key)
