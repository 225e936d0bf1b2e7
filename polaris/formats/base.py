"""Shared helpers for the record serialization formats."""

from datetime import datetime
from typing import Any, Optional

from polaris.types import datetime_to_ms, safe_ms_to_datetime


class FormatError(ValueError):
    """Raised when serialized records cannot be parsed."""


def to_iso(ms: Optional[int]) -> str:
    """ISO-8601 UTC string with millisecond precision.

    Returns '' for None and for timestamps datetime cannot represent.
    """
    dt = safe_ms_to_datetime(ms) if ms is not None else None
    if dt is None:
        return ""
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any, field_name: str) -> Optional[int]:
    """Accept epoch milliseconds (int or numeric string) or an ISO-8601 string.

    Raises:
        FormatError: For anything else.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise FormatError(f"{field_name} must be a timestamp, got {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    try:
        return datetime_to_ms(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError as e:
        raise FormatError(f"{field_name} is not a valid timestamp: {value!r}") from e
