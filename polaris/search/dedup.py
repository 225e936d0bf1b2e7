"""Near-duplicate detection on record titles.

Pairwise O(n^2) comparison; corpora here are personal-scale, so the
quadratic scan is acceptable.
"""

import logging
from typing import List, Sequence, Set

from polaris.config import DEFAULT_DUPLICATE_THRESHOLD
from polaris.search.fuzzy import clamp_threshold, similarity
from polaris.types import DuplicateCluster, MemoryRecord

logger = logging.getLogger(__name__)


def normalize_title(title: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return " ".join(title.lower().split())


def find_duplicates(
    records: Sequence[MemoryRecord],
    threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
) -> List[DuplicateCluster]:
    """Cluster records whose normalized titles are at least *threshold* similar.

    Each record joins at most one cluster: the first earlier record it
    matches becomes its head. Records with no match are left out.
    """
    threshold = clamp_threshold(threshold, DEFAULT_DUPLICATE_THRESHOLD)
    titles = [normalize_title(r.title) for r in records]
    processed: Set[str] = set()
    clusters: List[DuplicateCluster] = []

    for i, head in enumerate(records):
        if head.id in processed:
            continue
        members: List[MemoryRecord] = []
        for j in range(i + 1, len(records)):
            candidate = records[j]
            if candidate.id in processed or candidate.id == head.id:
                continue
            if similarity(titles[i], titles[j]) >= threshold:
                members.append(candidate)
                processed.add(candidate.id)
        if members:
            processed.add(head.id)
            clusters.append(DuplicateCluster(head=head, members=members))

    logger.debug(
        "find_duplicates: %d records, %d clusters at threshold %.2f",
        len(records),
        len(clusters),
        threshold,
    )
    return clusters
