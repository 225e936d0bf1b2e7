"""CSV export/import.

List and map fields (``tags``, ``related_ids``, ``metadata``) are stored as
JSON text in their cells so that ordering and arbitrary characters survive
a round trip. Timestamps are written as integer milliseconds.

The parser also reads the legacy web-app export (``ID, Type,
Title, ...`` headers, ISO timestamps, ``; ``-joined tags).
"""

import csv
import io
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from polaris.formats.base import FormatError, parse_timestamp
from polaris.types import MemoryRecord

logger = logging.getLogger(__name__)

COLUMNS = [
    "id",
    "type",
    "title",
    "content",
    "created_at",
    "updated_at",
    "tags",
    "status",
    "priority",
    "sentiment",
    "related_ids",
    "metadata",
]

# Header aliases, matched case-insensitively after trimming
COLUMN_MAPPINGS: Dict[str, List[str]] = {
    "id": ["id"],
    "type": ["type", "kind", "category"],
    "title": ["title", "name"],
    "content": ["content", "body", "text", "description"],
    "created_at": ["created_at", "created at", "createdat", "created"],
    "updated_at": ["updated_at", "updated at", "updatedat", "updated"],
    "tags": ["tags", "tag", "labels"],
    "status": ["status", "state"],
    "priority": ["priority"],
    "sentiment": ["sentiment", "mood"],
    "related_ids": ["related_ids", "relatedids", "related"],
    "metadata": ["metadata", "meta"],
}


def _encode_list(values: Sequence[str]) -> str:
    return json.dumps(list(values), ensure_ascii=False) if values else ""


def export_csv(records: Sequence[MemoryRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(COLUMNS)
    for r in records:
        writer.writerow(
            [
                r.id,
                r.type,
                r.title,
                r.content,
                r.created_at,
                "" if r.updated_at is None else r.updated_at,
                _encode_list(r.tags),
                r.status or "",
                r.priority or "",
                r.sentiment or "",
                _encode_list(r.related_ids),
                json.dumps(r.metadata, ensure_ascii=False) if r.metadata else "",
            ]
        )
    return buffer.getvalue()


def _map_headers(headers: List[str]) -> Dict[str, str]:
    """Map canonical field name -> header present in the file."""
    normalized = {h.strip().lower(): h for h in headers}
    mapping: Dict[str, str] = {}
    for canonical, aliases in COLUMN_MAPPINGS.items():
        for alias in aliases:
            if alias in normalized:
                mapping[canonical] = normalized[alias]
                break
    return mapping


def _decode_list(cell: str, field_name: str, row_num: int) -> List[str]:
    cell = cell.strip()
    if not cell:
        return []
    if cell.startswith("["):
        try:
            values = json.loads(cell)
        except json.JSONDecodeError as e:
            raise FormatError(f"Row {row_num}: {field_name} is not valid JSON: {e}") from e
        if not isinstance(values, list):
            raise FormatError(f"Row {row_num}: {field_name} must be a JSON array")
        return [str(v) for v in values]
    # Legacy "; "-joined cells
    return [part.strip() for part in cell.split(";") if part.strip()]


def _decode_metadata(cell: str, row_num: int) -> Dict[str, Any]:
    if not cell.strip():
        return {}
    try:
        value = json.loads(cell)
    except json.JSONDecodeError as e:
        raise FormatError(f"Row {row_num}: metadata is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise FormatError(f"Row {row_num}: metadata must be a JSON object")
    return value


def parse_csv(text: str) -> List[MemoryRecord]:
    """Parse CSV text into records.

    Raises:
        FormatError: If headers are missing or a row is invalid.
    """
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise FormatError("CSV file is empty or has no headers")

    mapping = _map_headers(list(reader.fieldnames))
    for required in ("id", "created_at"):
        if required not in mapping:
            raise FormatError(f"CSV is missing a '{required}' column")

    def cell(row: Dict[str, Optional[str]], name: str) -> str:
        header = mapping.get(name)
        if header is None:
            return ""
        return row.get(header) or ""

    records: List[MemoryRecord] = []
    # Row 1 is the header line
    for row_num, row in enumerate(reader, start=2):
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        created_at = parse_timestamp(cell(row, "created_at"), f"Row {row_num}: created_at")
        data = {
            "id": cell(row, "id"),
            "type": cell(row, "type"),
            "title": cell(row, "title"),
            "content": cell(row, "content"),
            "created_at": created_at,
            "updated_at": parse_timestamp(cell(row, "updated_at"), f"Row {row_num}: updated_at"),
            "tags": _decode_list(cell(row, "tags"), "tags", row_num),
            "status": cell(row, "status") or None,
            "priority": cell(row, "priority") or None,
            "sentiment": cell(row, "sentiment") or None,
            "related_ids": _decode_list(cell(row, "related_ids"), "related_ids", row_num),
            "metadata": _decode_metadata(cell(row, "metadata"), row_num),
        }
        try:
            records.append(MemoryRecord.from_dict(data))
        except ValueError as e:
            raise FormatError(f"Row {row_num}: {e}") from e

    return records
