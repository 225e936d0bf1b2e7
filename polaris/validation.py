"""Argument checks shared by the CLI and MCP layers.

Everything here raises ``ValueError`` with a message naming the offending
field; the MCP server turns those into ``Invalid input: ...`` replies and
the CLI prints them. ``sanitize_string`` is the one place control
characters are stripped.
"""

import math
import re
from typing import Any, List, Optional, Sequence

# Null bytes and control characters, except tab, newline and carriage return.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _kind(value: Any) -> str:
    return type(value).__name__


def _missing(field_name: str, default: Any) -> Any:
    if default is None:
        raise ValueError(f"{field_name} is required")
    return default


def sanitize_string(
    value: Any, field_name: str, max_length: int = 1000, required: bool = True
) -> str:
    """Check *value* is a string of at most *max_length* characters and strip control characters.

    With ``required=False``, None becomes '' and blank strings are allowed.

    Raises:
        ValueError: For non-strings, blank required values and overlong input.
    """
    if value is None and not required:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string, got {_kind(value)}")
    if len(value) > max_length:
        raise ValueError(f"{field_name} too long (max {max_length} characters, got {len(value)})")

    cleaned = _CONTROL_CHARS.sub("", value)
    if required and not cleaned.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return cleaned


def sanitize_array(
    value: Any, field_name: str, item_max_length: int = 500, max_items: int = 100
) -> List[str]:
    """Sanitize a list of strings such as tags or type names.

    Blank items are dropped; None items are an error rather than being
    silently skipped.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be an array, got {_kind(value)}")
    if len(value) > max_items:
        raise ValueError(f"{field_name} too many items (max {max_items}, got {len(value)})")

    items: List[str] = []
    for i, item in enumerate(value):
        if item is None:
            raise ValueError(f"{field_name} must not contain null items")
        cleaned = sanitize_string(item, f"{field_name}[{i}]", item_max_length, required=False)
        if cleaned:
            items.append(cleaned)
    return items


def validate_enum(
    value: Any,
    field_name: str,
    valid_values: Sequence[str],
    default: Optional[str] = None,
    required: bool = False,
) -> str:
    """Return *value* if it is one of *valid_values*, or *default* when it is None."""
    if value is None:
        return _missing(field_name, None if required else default)
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    if value not in valid_values:
        raise ValueError(f"{field_name} must be one of {list(valid_values)}, got '{value}'")
    return value


def validate_number(
    value: Any,
    field_name: str,
    min_val: Optional[float] = None,
    max_val: Optional[float] = None,
    default: Optional[float] = None,
) -> float:
    """Return *value* as a float inside ``[min_val, max_val]``.

    Bools, NaN and infinities are rejected even though Python treats them
    as numbers.
    """
    if value is None:
        return _missing(field_name, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number, got {_kind(value)}")

    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{field_name} must be a finite number, got {value}")
    if min_val is not None and number < min_val:
        raise ValueError(f"{field_name} must be >= {min_val}, got {value}")
    if max_val is not None and number > max_val:
        raise ValueError(f"{field_name} must be <= {max_val}, got {value}")
    return number


def validate_timestamp(value: Any, field_name: str) -> Optional[int]:
    """Validate an optional, non-negative epoch-milliseconds timestamp."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer timestamp in milliseconds")
    if value < 0:
        raise ValueError(f"{field_name} must be >= 0, got {value}")
    return value
