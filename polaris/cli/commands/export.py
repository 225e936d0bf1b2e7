"""Export command for the polaris CLI."""

import dataclasses
import sys
from pathlib import Path
from typing import TYPE_CHECKING, List

from polaris.cli.commands.helpers import build_filter
from polaris.formats import EXPORTERS, detect_format
from polaris.search import run_search
from polaris.types import MemoryRecord, SortKey

if TYPE_CHECKING:
    from polaris.config import SearchConfig


def cmd_export(args, records: List[MemoryRecord], now: int, config: "SearchConfig"):
    """Export (optionally filtered) records as JSON, CSV or Markdown."""
    fmt = args.format
    if fmt is None:
        fmt = detect_format(args.output) if args.output else "json"

    search_filter = build_filter(args)
    if args.exact:
        config = dataclasses.replace(config, use_fuzzy=False)
    results = run_search(
        records, search_filter, sort_key=SortKey(args.sort), now=now, config=config
    )

    exporter = EXPORTERS[fmt]
    if fmt == "csv":
        text = exporter(results.records)
    else:
        text = exporter(results.records, exported_at=now)

    if args.output:
        output = Path(args.output).expanduser()
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(text.encode("utf-8"))
        print(f"✓ Exported {results.count} record(s) to {output} ({fmt})", file=sys.stderr)
    else:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
