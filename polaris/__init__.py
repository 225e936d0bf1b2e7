"""
Polaris - search and analytics over a personal memory snapshot.

Boolean/fuzzy search, relevance ranking, grouping, statistics, duplicate
detection and lossless export for heterogeneous memory records.
"""

from .config import RelevanceWeights, SearchConfig, load_config
from .events import EntityEventBus
from .formats import FormatError, dump_records, load_records
from .normalize import Entity, EntityKind, normalize_entities, normalize_entity
from .search import (
    calculate_stats,
    filter_memories,
    find_duplicates,
    fuzzy_match,
    group_memories,
    highlight_text,
    parse_boolean_query,
    run_saved_query,
    run_search,
    sort_memories,
)
from .types import GroupKey, MemoryRecord, SavedQuery, SearchFilter, SearchIn, SortKey

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("polaris-memory")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "Entity",
    "EntityEventBus",
    "EntityKind",
    "FormatError",
    "GroupKey",
    "MemoryRecord",
    "RelevanceWeights",
    "SavedQuery",
    "SearchConfig",
    "SearchFilter",
    "SearchIn",
    "SortKey",
    "calculate_stats",
    "dump_records",
    "filter_memories",
    "find_duplicates",
    "fuzzy_match",
    "group_memories",
    "highlight_text",
    "load_config",
    "load_records",
    "normalize_entities",
    "normalize_entity",
    "parse_boolean_query",
    "run_saved_query",
    "run_search",
    "sort_memories",
]
