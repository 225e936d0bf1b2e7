"""JSON export/import.

Export layout::

    {
      "export_date": "2026-01-01T00:00:00.000Z",
      "total_records": 2,
      "memories": [{...record fields..., "created_at_iso": "...", "updated_at_iso": ...}]
    }

The ``*_iso`` fields are informational; parsing uses the integer
timestamps. A bare JSON list of records is accepted too.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from polaris.formats.base import FormatError, to_iso
from polaris.types import MemoryRecord, now_ms

logger = logging.getLogger(__name__)


def export_json(
    records: Sequence[MemoryRecord], exported_at: Optional[int] = None, indent: int = 2
) -> str:
    exported_at = now_ms() if exported_at is None else exported_at
    memories = []
    for record in records:
        data = record.to_dict()
        data["created_at_iso"] = to_iso(record.created_at)
        data["updated_at_iso"] = to_iso(record.updated_at) or None
        memories.append(data)
    payload = {
        "export_date": to_iso(exported_at),
        "total_records": len(records),
        "memories": memories,
    }
    return json.dumps(payload, indent=indent, ensure_ascii=False)


def parse_json(text: str) -> List[MemoryRecord]:
    """Parse a JSON export (or bare list) back into records.

    Raises:
        FormatError: On invalid JSON or an invalid record.
    """
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"Invalid JSON: {e}") from e

    if isinstance(data, dict):
        items = data.get("memories")
        if items is None:
            raise FormatError("JSON export has no 'memories' list")
    else:
        items = data
    if not isinstance(items, list):
        raise FormatError(f"Expected a list of records, got {type(items).__name__}")

    records: List[MemoryRecord] = []
    for i, item in enumerate(items):
        try:
            records.append(MemoryRecord.from_dict(item))
        except ValueError as e:
            raise FormatError(f"Record {i}: {e}") from e

    declared: Optional[int] = data.get("total_records") if isinstance(data, dict) else None
    if declared is not None and declared != len(records):
        logger.warning("JSON export declares %s records but contains %d", declared, len(records))
    return records


def records_to_dicts(records: Sequence[MemoryRecord]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in records]
