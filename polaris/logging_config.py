"""Logging setup for polaris.

Logs go to ``<data_dir>/logs/local-YYYY-MM-DD.log``. Library modules only
call ``logging.getLogger(__name__)``; this module is used by entry points
(CLI, MCP server) to attach a file handler to the ``polaris`` logger.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

from polaris.config import get_data_dir

LOGGER_NAME = "polaris"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_polaris_logging(
    level: str = "INFO", data_dir: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """Configure the ``polaris`` logger with a dated file handler.

    Calling this again replaces the previous polaris file handler instead
    of stacking a second one.

    Args:
        level: Log level name (case-insensitive). Unknown names fall back to INFO.
        data_dir: Base directory; defaults to ``POLARIS_DATA_DIR`` or ``~/.polaris``.
    """
    logger = logging.getLogger(LOGGER_NAME)
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logger.setLevel(numeric_level)

    log_dir = Path(data_dir).expanduser() if data_dir else get_data_dir()
    log_dir = log_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"local-{date.today().isoformat()}.log"

    for handler in list(logger.handlers):
        if getattr(handler, "_polaris_handler", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._polaris_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


def _format_fields(**fields: Any) -> str:
    return " ".join(f"{key}={value}" for key, value in fields.items() if value is not None)


def log_search(
    query: str, total: int, matched: int, sort: str, group: str, duration_ms: float
) -> None:
    """Record one search invocation."""
    logging.getLogger(f"{LOGGER_NAME}.search").info(
        "search %s",
        _format_fields(
            query_len=len(query),
            total=total,
            matched=matched,
            sort=sort,
            group=group,
            duration_ms=round(duration_ms, 2),
        ),
    )


def log_stats(total: int, duration_ms: float) -> None:
    logging.getLogger(f"{LOGGER_NAME}.stats").info(
        "stats %s", _format_fields(total=total, duration_ms=round(duration_ms, 2))
    )


def log_duplicates(total: int, clusters: int, threshold: float, duration_ms: float) -> None:
    logging.getLogger(f"{LOGGER_NAME}.dedup").info(
        "duplicates %s",
        _format_fields(
            total=total,
            clusters=clusters,
            threshold=threshold,
            duration_ms=round(duration_ms, 2),
        ),
    )
