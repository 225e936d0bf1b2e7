"""
Polaris MCP Server - memory search tools for MCP clients.

Exposes search, statistics, duplicate detection and highlighting over a
record snapshot file as Model Context Protocol tools.

Security Features:
- JSON Schema validation of every tool call, then per-tool sanitization
- Secure error handling with no information disclosure
- Structured logging for debugging

Usage:
    polaris --records memories.json mcp  # Start MCP server (stdio transport)
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from jsonschema import Draft7Validator
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
)

from polaris.config import SearchConfig, load_config
from polaris.formats import FormatError, load_records
from polaris.mcp.handlers import HANDLERS, RECORDLESS_TOOLS, VALIDATORS
from polaris.mcp.tool_definitions import TOOL_SCHEMAS, TOOLS
from polaris.types import MemoryRecord, now_ms

logger = logging.getLogger(__name__)

# Initialize MCP server
mcp = Server("polaris")

_records_path: Optional[Path] = None
_config: SearchConfig = SearchConfig()

# (path, mtime_ns) -> parsed snapshot; reloaded when the file changes
_records_cache: Dict[str, Any] = {}

_schema_validators: Dict[str, Draft7Validator] = {
    name: Draft7Validator(schema) for name, schema in TOOL_SCHEMAS.items()
}


def set_records_path(path: Union[str, Path, None]) -> None:
    """Set the record snapshot file served by this MCP session."""
    global _records_path
    _records_path = Path(path).expanduser() if path else None
    _records_cache.clear()


def set_config(config: SearchConfig) -> None:
    global _config
    _config = config


def get_records() -> List[MemoryRecord]:
    """Load the snapshot, re-reading it only when the file has changed.

    Raises:
        FileNotFoundError: If no record file is configured or it is missing.
        FormatError: If the file cannot be parsed.
    """
    if _records_path is None:
        raise FileNotFoundError("No record file configured (set POLARIS_RECORDS_FILE)")
    if not _records_path.exists():
        raise FileNotFoundError(f"File not found: {_records_path}")

    key: Tuple[str, int] = (str(_records_path), _records_path.stat().st_mtime_ns)
    if _records_cache.get("key") != key:
        _records_cache["records"] = load_records(_records_path)
        _records_cache["key"] = key
        logger.info(f"Loaded {len(_records_cache['records'])} records from {_records_path}")
    return _records_cache["records"]


def validate_tool_input(name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and sanitize MCP tool inputs."""
    try:
        if not isinstance(name, str):
            raise ValueError(f"tool name must be a string, got {type(name).__name__}")
        if not name:
            raise ValueError("tool name must not be empty")
        if not isinstance(arguments, dict):
            raise ValueError(f"arguments must be an object, got {type(arguments).__name__}")

        validator = VALIDATORS.get(name)
        if validator is None:
            raise ValueError(f"Unknown tool: {name}")

        errors = sorted(
            _schema_validators[name].iter_errors(arguments), key=lambda err: list(err.path)
        )
        if errors:
            first = errors[0]
            path = ".".join(str(part) for part in first.path) or "(root)"
            raise ValueError(f"Schema validation failed at {path}: {first.message}")

        return validator(arguments)

    except (ValueError, TypeError) as e:
        logger.warning(f"Input validation failed for tool {name}: {e}")
        raise ValueError(f"Invalid input: {str(e)}")


def handle_tool_error(e: Exception, tool_name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """Handle tool errors securely."""
    if isinstance(e, FormatError):
        logger.error(f"Record file unreadable for tool {tool_name}: {e}")
        return [TextContent(type="text", text="Record file could not be parsed")]

    elif isinstance(e, ValueError):
        # Input validation or business logic error
        logger.warning(f"Invalid input for tool {tool_name}: {e}")
        msg = str(e)
        if not msg.startswith("Invalid input"):
            msg = f"Invalid input: {msg}"
        return [TextContent(type="text", text=msg)]

    elif isinstance(e, PermissionError):
        logger.warning(f"Permission denied for tool {tool_name}")
        return [TextContent(type="text", text="Access denied")]

    elif isinstance(e, FileNotFoundError):
        logger.warning(f"Resource not found for tool {tool_name}: {e}")
        return [TextContent(type="text", text="Resource not found")]

    else:
        # Unknown error - log full details but return generic message
        argument_keys = list(arguments.keys()) if isinstance(arguments, dict) else []
        logger.error(
            f"Internal error in tool {tool_name}",
            extra={
                "tool_name": tool_name,
                "arguments_keys": argument_keys,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        return [TextContent(type="text", text="Internal server error")]


# =============================================================================
# MCP PROTOCOL HANDLERS
# =============================================================================


@mcp.list_tools()
async def list_tools() -> list[Tool]:
    """List available memory tools."""
    return list(TOOLS)


@mcp.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls with validation and error handling."""
    try:
        sanitized_args = validate_tool_input(name, arguments)
        records: List[MemoryRecord] = [] if name in RECORDLESS_TOOLS else get_records()
        result = HANDLERS[name](sanitized_args, records, now_ms(), _config)
        return [TextContent(type="text", text=result)]

    except Exception as e:
        return handle_tool_error(e, name, arguments)


async def run_server():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await mcp.run(
            read_stream,
            write_stream,
            mcp.create_initialization_options(),
        )


def main(records_path: Union[str, Path, None] = None, config: Optional[SearchConfig] = None):
    """Entry point for MCP server.

    Record file resolution: explicit *records_path*, then
    ``POLARIS_RECORDS_FILE``.
    """
    config = config or load_config()
    set_config(config)
    set_records_path(records_path or config.records_file)
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
