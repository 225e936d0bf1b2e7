"""Markdown export/import.

The export is meant to be read by people, but each record also carries a
one-line HTML comment with its structured fields so the file can be
parsed back without loss::

    <!-- polaris:record {"id": "...", ..., "content_length": 42} -->
    ## 1. Title
    - **Type:** Journal entry
    ...
    ### Content

    <exactly content_length characters>

The visible bullet list is informational; the comment is authoritative.
"""

import json
import logging
from typing import List, Optional, Sequence

from polaris.formats.base import FormatError, to_iso
from polaris.types import MemoryRecord, now_ms

logger = logging.getLogger(__name__)

RECORD_MARKER = "<!-- polaris:record "
COMMENT_END = " -->"
CONTENT_HEADING = "### Content\n\n"
# Visible fields are written on one line each, so the heading can only start a line here.
CONTENT_LINE = "\n" + CONTENT_HEADING


def _header_json(record: MemoryRecord) -> str:
    data = record.to_dict()
    content = data.pop("content")
    data["content_length"] = len(content)
    # No '>' may appear inside the comment, so "-->" can never occur in it.
    return json.dumps(data, ensure_ascii=False).replace(">", "\\u003e")


def _one_line(value: str) -> str:
    return " ".join(str(value).split())


def export_markdown(records: Sequence[MemoryRecord], exported_at: Optional[int] = None) -> str:
    exported_at = now_ms() if exported_at is None else exported_at
    lines = [
        "# Memory Export",
        "",
        f"**Export Date:** {to_iso(exported_at)}",
        f"**Total Records:** {len(records)}",
        "",
        "---",
        "",
    ]
    for index, record in enumerate(records, start=1):
        lines.append(f"{RECORD_MARKER}{_header_json(record)}{COMMENT_END}")
        lines.append(f"## {index}. {_one_line(record.title)}")
        lines.append("")
        lines.append(f"- **Type:** {_one_line(record.type)}")
        lines.append(f"- **Created:** {to_iso(record.created_at)}")
        if record.updated_at is not None:
            lines.append(f"- **Updated:** {to_iso(record.updated_at)}")
        if record.tags:
            lines.append(f"- **Tags:** {', '.join(_one_line(tag) for tag in record.tags)}")
        if record.status:
            lines.append(f"- **Status:** {_one_line(record.status)}")
        if record.priority:
            lines.append(f"- **Priority:** {_one_line(record.priority)}")
        if record.sentiment:
            lines.append(f"- **Sentiment:** {_one_line(record.sentiment)}")
        lines.append("")
        lines.append(CONTENT_HEADING + record.content)
        lines.append("")
        lines.append("---")
        lines.append("")
    return "\n".join(lines)


def parse_markdown(text: str) -> List[MemoryRecord]:
    """Parse a Markdown export produced by ``export_markdown``.

    Raises:
        FormatError: If a record header or its content block is malformed.
    """
    records: List[MemoryRecord] = []
    pos = 0
    while True:
        start = text.find(RECORD_MARKER, pos)
        if start < 0:
            break
        header_start = start + len(RECORD_MARKER)
        header_end = text.find(COMMENT_END, header_start)
        if header_end < 0:
            raise FormatError(f"Unterminated record header at offset {start}")

        index = len(records) + 1
        try:
            data = json.loads(text[header_start:header_end])
        except json.JSONDecodeError as e:
            raise FormatError(f"Record {index}: invalid header JSON: {e}") from e
        if not isinstance(data, dict):
            raise FormatError(f"Record {index}: header must be a JSON object")

        length = data.pop("content_length", None)
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise FormatError(f"Record {index}: missing or invalid content_length")

        body = text.find(CONTENT_LINE, header_end)
        if body < 0:
            raise FormatError(f"Record {index}: missing content section")
        content_start = body + len(CONTENT_LINE)
        content_end = content_start + length
        if content_end > len(text):
            raise FormatError(f"Record {index}: content is truncated")

        data["content"] = text[content_start:content_end]
        try:
            records.append(MemoryRecord.from_dict(data))
        except ValueError as e:
            raise FormatError(f"Record {index}: {e}") from e
        pos = content_end

    if not records and text.strip():
        logger.warning("Markdown input contained no polaris record headers")
    return records
