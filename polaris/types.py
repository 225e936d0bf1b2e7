"""
Shared record types for polaris.

All search dataclasses live here. These are the shared vocabulary between
the normalization layer, the search engine, the exporters and the outer
surfaces (CLI, MCP). The engine only ever sees ``MemoryRecord``.

Timestamps are integer milliseconds since the Unix epoch (UTC) everywhere.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# === Time Helpers ===

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


def ms_to_datetime(ms: int, tz=timezone.utc) -> datetime:
    """Convert an epoch-milliseconds timestamp to an aware datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=tz)


def safe_ms_to_datetime(ms: int, tz=timezone.utc) -> Optional[datetime]:
    """Like ``ms_to_datetime`` but returns None when *ms* is outside datetime's range."""
    try:
        return ms_to_datetime(ms, tz)
    except (ValueError, OverflowError, OSError):
        return None


def datetime_to_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(round(dt.timestamp() * 1000))


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds.

    Only outer layers (CLI, MCP) call this; the search engine always
    receives ``now`` as an argument.
    """
    return datetime_to_ms(datetime.now(timezone.utc))


# === Enums ===


class SortKey(str, Enum):
    """Result orderings supported by the ranker."""

    RELEVANCE = "relevance"
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    TITLE = "title"
    TYPE = "type"


class GroupKey(str, Enum):
    """Bucketing strategies supported by the grouper."""

    NONE = "none"
    TYPE = "type"
    DATE = "date"
    TAGS = "tags"
    STATUS = "status"
    PRIORITY = "priority"


class SearchIn(str, Enum):
    """Which record fields the text query is matched against."""

    ALL = "all"
    TITLE = "title"
    CONTENT = "content"


VALID_SORT_KEYS = [k.value for k in SortKey]
VALID_GROUP_KEYS = [k.value for k in GroupKey]
VALID_SEARCH_IN = [s.value for s in SearchIn]


# === Records ===


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


@dataclass(frozen=True)
class MemoryRecord:
    """Normalized, immutable view of any trackable personal entity."""

    id: str
    type: str
    title: str
    content: str
    created_at: int
    updated_at: Optional[int] = None
    tags: Tuple[str, ...] = ()
    status: Optional[str] = None
    priority: Optional[str] = None
    sentiment: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    related_ids: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so snapshots stay immutable.
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", _as_tuple(self.tags))
        if not isinstance(self.related_ids, tuple):
            object.__setattr__(self, "related_ids", _as_tuple(self.related_ids))

    @property
    def has_relationships(self) -> bool:
        return len(self.related_ids) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "content": self.content,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "tags": list(self.tags),
            "status": self.status,
            "priority": self.priority,
            "sentiment": self.sentiment,
            "metadata": dict(self.metadata),
            "related_ids": list(self.related_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemoryRecord":
        """Build a record from a dict using snake_case or camelCase keys.

        Raises:
            ValueError: If ``id`` or the creation timestamp is missing.
        """
        if not isinstance(data, dict):
            raise ValueError(f"record must be an object, got {type(data).__name__}")
        record_id = data.get("id")
        if record_id is None or record_id == "":
            raise ValueError("record is missing 'id'")
        created = data.get("created_at", data.get("createdAt"))
        if created is None:
            raise ValueError(f"record {record_id!r} is missing 'created_at'")
        try:
            created_at = int(created)
            updated_at = _optional_int(data.get("updated_at", data.get("updatedAt")))
        except (TypeError, ValueError) as e:
            raise ValueError(f"record {record_id!r} has a non-integer timestamp: {e}") from e

        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValueError(f"record {record_id!r} metadata must be an object")

        return cls(
            id=str(record_id),
            type=str(data.get("type") or ""),
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            created_at=created_at,
            updated_at=updated_at,
            tags=_as_tuple(data.get("tags")),
            status=data.get("status") or None,
            priority=data.get("priority") or None,
            sentiment=data.get("sentiment") or None,
            metadata=dict(metadata),
            related_ids=_as_tuple(data.get("related_ids", data.get("relatedIds"))),
        )


@dataclass
class SearchFilter:
    """Constraints applied by ``filter_memories``.

    A default-constructed filter matches every record.
    """

    query: str = ""
    types: List[str] = field(default_factory=list)
    exclude_types: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    date_from: Optional[int] = None
    date_to: Optional[int] = None
    search_in: SearchIn = SearchIn.ALL
    status: Optional[List[str]] = None
    priority: Optional[List[str]] = None
    sentiment: Optional[List[str]] = None
    has_relationships: Optional[bool] = None

    def __post_init__(self) -> None:
        if not isinstance(self.search_in, SearchIn):
            self.search_in = SearchIn(self.search_in)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "types": list(self.types),
            "exclude_types": list(self.exclude_types),
            "tags": list(self.tags),
            "date_from": self.date_from,
            "date_to": self.date_to,
            "search_in": self.search_in.value,
            "status": list(self.status) if self.status is not None else None,
            "priority": list(self.priority) if self.priority is not None else None,
            "sentiment": list(self.sentiment) if self.sentiment is not None else None,
            "has_relationships": self.has_relationships,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchFilter":
        def _opt_list(key: str, alt: Optional[str] = None) -> Optional[List[str]]:
            value = data.get(key, data.get(alt) if alt else None)
            return list(value) if value is not None else None

        return cls(
            query=data.get("query") or "",
            types=list(data.get("types") or []),
            exclude_types=list(data.get("exclude_types", data.get("excludeTypes")) or []),
            tags=list(data.get("tags") or []),
            date_from=_optional_int(data.get("date_from", data.get("dateFrom"))),
            date_to=_optional_int(data.get("date_to", data.get("dateTo"))),
            search_in=SearchIn(data.get("search_in", data.get("searchIn")) or "all"),
            status=_opt_list("status"),
            priority=_opt_list("priority"),
            sentiment=_opt_list("sentiment"),
            has_relationships=data.get("has_relationships", data.get("hasRelationships")),
        )


@dataclass
class SavedQuery:
    """A named filter + sort + grouping, persisted by the presentation layer."""

    id: str
    name: str
    filter: SearchFilter = field(default_factory=SearchFilter)
    sort: SortKey = SortKey.RELEVANCE
    group_by: GroupKey = GroupKey.NONE
    created_at: int = 0

    def __post_init__(self) -> None:
        self.sort = SortKey(self.sort)
        self.group_by = GroupKey(self.group_by)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "filter": self.filter.to_dict(),
            "sort": self.sort.value,
            "group_by": self.group_by.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedQuery":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            filter=SearchFilter.from_dict(data.get("filter", data.get("filters")) or {}),
            sort=data.get("sort") or SortKey.RELEVANCE,
            group_by=data.get("group_by", data.get("groupBy")) or GroupKey.NONE,
            created_at=int(data.get("created_at", data.get("createdAt")) or 0),
        )


@dataclass
class BooleanQuery:
    """A free-text query decomposed into term sets."""

    required: List[str] = field(default_factory=list)
    optional: List[str] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    exact: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.required or self.optional or self.excluded or self.exact)

    def terms(self) -> List[str]:
        """Positive terms (everything a match could be highlighted for)."""
        return [*self.required, *self.optional, *self.exact]


@dataclass
class DuplicateCluster:
    """A head record and the records whose titles are near-duplicates of it."""

    head: MemoryRecord
    members: List[MemoryRecord] = field(default_factory=list)

    @property
    def ids(self) -> List[str]:
        return [self.head.id] + [m.id for m in self.members]


@dataclass
class TimeRangeCounts:
    last_24h: int = 0
    last_7d: int = 0
    last_30d: int = 0
    last_365d: int = 0


@dataclass
class MemoryStats:
    """Aggregate statistics over a record set."""

    total: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)
    by_tag: Dict[str, int] = field(default_factory=dict)
    by_time_range: TimeRangeCounts = field(default_factory=TimeRangeCounts)
    average_per_day: float = 0.0
    most_active_day: str = ""
    oldest_memory: int = 0
    newest_memory: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "by_type": dict(self.by_type),
            "by_tag": dict(self.by_tag),
            "by_time_range": {
                "last_24h": self.by_time_range.last_24h,
                "last_7d": self.by_time_range.last_7d,
                "last_30d": self.by_time_range.last_30d,
                "last_365d": self.by_time_range.last_365d,
            },
            "average_per_day": self.average_per_day,
            "most_active_day": self.most_active_day,
            "oldest_memory": self.oldest_memory,
            "newest_memory": self.newest_memory,
        }
