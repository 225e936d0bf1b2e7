"""Lossless record serialization (JSON, CSV, Markdown).

Each format module exposes ``export_<fmt>(records) -> str`` and
``parse_<fmt>(text) -> List[MemoryRecord]``. ``load_records`` and
``dump_records`` pick the format from a file extension.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from polaris.formats.base import FormatError
from polaris.formats.csv_format import export_csv, parse_csv
from polaris.formats.json_format import export_json, parse_json
from polaris.formats.markdown_format import export_markdown, parse_markdown
from polaris.types import MemoryRecord

logger = logging.getLogger(__name__)

EXPORTERS: Dict[str, Callable[..., str]] = {
    "json": export_json,
    "csv": export_csv,
    "markdown": export_markdown,
}

PARSERS: Dict[str, Callable[[str], List[MemoryRecord]]] = {
    "json": parse_json,
    "csv": parse_csv,
    "markdown": parse_markdown,
}

EXTENSIONS = {
    ".json": "json",
    ".csv": "csv",
    ".md": "markdown",
    ".markdown": "markdown",
}

VALID_FORMATS = sorted(EXPORTERS)


def detect_format(path: Union[str, Path]) -> str:
    """Format name for *path*'s extension.

    Raises:
        FormatError: For unsupported extensions.
    """
    suffix = Path(path).suffix.lower()
    fmt = EXTENSIONS.get(suffix)
    if fmt is None:
        raise FormatError(f"Unsupported file extension '{suffix}' (use .json, .csv or .md)")
    return fmt


def load_records(path: Union[str, Path], fmt: Optional[str] = None) -> List[MemoryRecord]:
    """Read a record snapshot from disk.

    Raises:
        FileNotFoundError: If *path* does not exist.
        FormatError: If the file cannot be parsed.
    """
    file_path = Path(path).expanduser()
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    fmt = fmt or detect_format(file_path)
    # Bytes keep line endings intact; Markdown content is sliced by length.
    records = PARSERS[fmt](file_path.read_bytes().decode("utf-8"))
    logger.debug("Loaded %d records from %s (%s)", len(records), file_path, fmt)
    return records


def dump_records(
    records: Sequence[MemoryRecord], path: Union[str, Path], fmt: Optional[str] = None
) -> Path:
    """Write *records* to *path* in the format implied by its extension (or *fmt*)."""
    file_path = Path(path).expanduser()
    fmt = fmt or detect_format(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(EXPORTERS[fmt](records).encode("utf-8"))
    return file_path


__all__ = [
    "EXPORTERS",
    "FormatError",
    "PARSERS",
    "VALID_FORMATS",
    "detect_format",
    "dump_records",
    "export_csv",
    "export_json",
    "export_markdown",
    "load_records",
    "parse_csv",
    "parse_json",
    "parse_markdown",
]
