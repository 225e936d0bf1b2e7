"""Filter -> rank -> group composition.

The stages are independent pure functions; this module only wires them
together with values from a ``SearchConfig``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from polaris.config import SearchConfig
from polaris.search.filters import filter_memories
from polaris.search.grouping import group_label, group_memories
from polaris.search.ranking import sort_memories
from polaris.types import GroupKey, MemoryRecord, SavedQuery, SearchFilter, SortKey

logger = logging.getLogger(__name__)


@dataclass
class SearchResults:
    """Ranked matches plus their grouping."""

    records: List[MemoryRecord] = field(default_factory=list)
    groups: Dict[Optional[str], List[MemoryRecord]] = field(default_factory=dict)
    total_input: int = 0

    @property
    def count(self) -> int:
        return len(self.records)

    def group_ids(self) -> List[Dict[str, Any]]:
        """Buckets as ``{"group", "ids"}`` entries, in bucket order."""
        return [
            {"group": group_label(key), "ids": [r.id for r in members]}
            for key, members in self.groups.items()
        ]


def run_search(
    records: Sequence[MemoryRecord],
    search_filter: Optional[SearchFilter] = None,
    sort_key: SortKey = SortKey.RELEVANCE,
    group_key: GroupKey = GroupKey.NONE,
    now: Optional[int] = None,
    config: Optional[SearchConfig] = None,
) -> SearchResults:
    """Run the full pipeline over a record snapshot.

    Date grouping needs *now*; without it the results come back ungrouped.
    """
    config = config or SearchConfig()
    search_filter = search_filter or SearchFilter()
    group_key = GroupKey(group_key)
    if group_key == GroupKey.DATE and now is None:
        logger.warning("Date grouping requested without a reference time; returning ungrouped results")
        group_key = GroupKey.NONE

    filtered = filter_memories(
        records,
        search_filter,
        use_fuzzy=config.use_fuzzy,
        threshold=config.fuzzy_threshold,
    )
    ranked = sort_memories(
        filtered,
        sort_key,
        query=search_filter.query,
        now=now,
        weights=config.weights,
    )
    groups = group_memories(ranked, group_key, now=now)
    return SearchResults(records=ranked, groups=groups, total_input=len(records))


def run_saved_query(
    records: Sequence[MemoryRecord],
    saved: SavedQuery,
    now: Optional[int] = None,
    config: Optional[SearchConfig] = None,
) -> SearchResults:
    """Re-run a saved query against a fresh snapshot."""
    return run_search(
        records,
        saved.filter,
        sort_key=saved.sort,
        group_key=saved.group_by,
        now=now,
        config=config,
    )
