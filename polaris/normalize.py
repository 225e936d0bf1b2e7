"""Entity normalization: domain entities -> MemoryRecord.

Each domain entity arrives as a tagged union (``EntityKind`` + raw payload
dict, camelCase or snake_case keys) and is mapped exactly once into the
``MemoryRecord`` shape. The search engine never sees the raw payloads.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from polaris.types import MemoryRecord

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    """Domain entity kinds and the record type label each one gets."""

    JOURNAL = "journal"
    AGENDA = "agenda"
    CALENDAR = "calendar"
    DELIVERABLE = "deliverable"
    BRAND = "brand"
    PERSON = "person"
    CONCEPT = "concept"
    GOAL = "goal"


TYPE_LABELS: Dict[EntityKind, str] = {
    EntityKind.JOURNAL: "Journal entry",
    EntityKind.AGENDA: "Agenda task",
    EntityKind.CALENDAR: "Calendar event",
    EntityKind.DELIVERABLE: "Deliverable",
    EntityKind.BRAND: "Brand atom",
    EntityKind.PERSON: "Person",
    EntityKind.CONCEPT: "Concept",
    EntityKind.GOAL: "Goal",
}


@dataclass
class Entity:
    """A raw domain entity tagged with its kind."""

    kind: EntityKind
    payload: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.kind = EntityKind(self.kind)


def _get(payload: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return default


def _text(payload: Dict[str, Any], *keys: str) -> str:
    value = _get(payload, *keys, default="")
    return str(value)


def _join(*parts: str, sep: str = "\n") -> str:
    return sep.join(p for p in parts if p)


def _base(kind: EntityKind, payload: Dict[str, Any], **overrides: Any) -> MemoryRecord:
    entity_id = _get(payload, "id")
    if entity_id is None or entity_id == "":
        raise ValueError(f"{kind.value} entity is missing 'id'")
    created = _get(payload, "createdAt", "created_at")
    if created is None:
        raise ValueError(f"{kind.value} entity {entity_id!r} is missing 'createdAt'")

    fields_: Dict[str, Any] = {
        "id": str(entity_id),
        "type": TYPE_LABELS[kind],
        "title": _text(payload, "title", "name"),
        "content": _text(payload, "content", "description"),
        "created_at": int(created),
        "updated_at": _get(payload, "updatedAt", "updated_at"),
        "tags": _get(payload, "tags", default=()),
        "status": _get(payload, "status"),
        "priority": _get(payload, "priority"),
        "sentiment": _get(payload, "sentiment", "mood"),
        "metadata": {"kind": kind.value},
        "related_ids": _get(payload, "relatedIds", "related_ids", default=()),
    }
    fields_.update(overrides)
    if fields_["updated_at"] is not None:
        fields_["updated_at"] = int(fields_["updated_at"])
    for key in ("status", "priority", "sentiment"):
        if fields_[key] is not None:
            fields_[key] = str(fields_[key])
    return MemoryRecord(**fields_)


def _journal(p: Dict[str, Any]) -> MemoryRecord:
    return _base(EntityKind.JOURNAL, p)


def _agenda(p: Dict[str, Any]) -> MemoryRecord:
    deliverable_id = _get(p, "deliverableId", "deliverable_id")
    content = _text(p, "description")
    if not content and deliverable_id:
        content = f"Deliverable: {deliverable_id}"
    related = (str(deliverable_id),) if deliverable_id else ()
    metadata = {"kind": EntityKind.AGENDA.value}
    if _get(p, "dueAt", "due_at") is not None:
        metadata["due_at"] = _get(p, "dueAt", "due_at")
    return _base(EntityKind.AGENDA, p, content=content, related_ids=related, metadata=metadata)


def _calendar(p: Dict[str, Any]) -> MemoryRecord:
    start = _get(p, "startAt", "start_at", "createdAt", "created_at")
    metadata: Dict[str, Any] = {"kind": EntityKind.CALENDAR.value}
    for key, alias in (("endAt", "end_at"), ("location", "location"), ("eventType", "event_type")):
        value = _get(p, key, alias)
        if value is not None:
            metadata[alias] = value
    participants = tuple(str(x) for x in (_get(p, "participants", default=()) or ()))
    return _base(
        EntityKind.CALENDAR,
        {**p, "createdAt": start},
        metadata=metadata,
        related_ids=participants,
    )


def _deliverable(p: Dict[str, Any]) -> MemoryRecord:
    content = (
        f"{_text(p, 'description')}\n\n"
        f"Guardrails: {_text(p, 'guardrails')}\n"
        f"Success: {_text(p, 'successCriteria', 'success_criteria')}"
    )
    return _base(EntityKind.DELIVERABLE, p, content=content)


def _brand(p: Dict[str, Any]) -> MemoryRecord:
    return _base(EntityKind.BRAND, p, title=_text(p, "name", "title"))


def _person(p: Dict[str, Any]) -> MemoryRecord:
    metadata: Dict[str, Any] = {"kind": EntityKind.PERSON.value}
    for key in ("email", "company", "phone", "location"):
        if p.get(key):
            metadata[key] = p[key]
    connections = tuple(str(x) for x in (_get(p, "connections", default=()) or ()))
    return _base(
        EntityKind.PERSON,
        p,
        title=_text(p, "name", "title"),
        content=_join(_text(p, "role"), _text(p, "notes")),
        metadata=metadata,
        related_ids=connections,
    )


def _concept(p: Dict[str, Any]) -> MemoryRecord:
    metadata: Dict[str, Any] = {"kind": EntityKind.CONCEPT.value}
    if p.get("category"):
        metadata["category"] = p["category"]
    return _base(
        EntityKind.CONCEPT,
        p,
        title=_text(p, "name", "title"),
        content=_join(_text(p, "description"), _text(p, "notes"), sep="\n\n"),
        metadata=metadata,
    )


def _goal(p: Dict[str, Any]) -> MemoryRecord:
    metadata: Dict[str, Any] = {"kind": EntityKind.GOAL.value}
    for key, alias in (("goalType", "goal_type"), ("scope", "scope")):
        value = _get(p, key, alias)
        if value is not None:
            metadata[alias] = value
    return _base(EntityKind.GOAL, p, metadata=metadata)


NORMALIZERS: Dict[EntityKind, Callable[[Dict[str, Any]], MemoryRecord]] = {
    EntityKind.JOURNAL: _journal,
    EntityKind.AGENDA: _agenda,
    EntityKind.CALENDAR: _calendar,
    EntityKind.DELIVERABLE: _deliverable,
    EntityKind.BRAND: _brand,
    EntityKind.PERSON: _person,
    EntityKind.CONCEPT: _concept,
    EntityKind.GOAL: _goal,
}


def normalize_entity(entity: Entity) -> MemoryRecord:
    """Map one entity into a MemoryRecord.

    Raises:
        ValueError: If the payload has no id or creation time.
    """
    return NORMALIZERS[entity.kind](entity.payload)


def normalize_entities(
    entities: Iterable[Entity], skipped: Optional[List[Dict[str, Any]]] = None
) -> List[MemoryRecord]:
    """Normalize many entities, skipping (and logging) unusable payloads.

    Args:
        entities: Entities to map.
        skipped: If given, receives one ``{"kind", "error"}`` dict per
            skipped payload.
    """
    records: List[MemoryRecord] = []
    for entity in entities:
        try:
            records.append(normalize_entity(entity))
        except (TypeError, ValueError) as e:
            logger.warning("Skipping %s entity: %s", entity.kind.value, e)
            if skipped is not None:
                skipped.append({"kind": entity.kind.value, "error": str(e)})
    return records
