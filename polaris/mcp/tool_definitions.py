"""MCP tool schema definitions for polaris.

Each Tool() defines the name, description, and JSON Schema for one MCP tool.
Validators and handlers live in polaris.mcp.handlers.
"""

from mcp.types import Tool

from polaris.types import VALID_GROUP_KEYS, VALID_SEARCH_IN, VALID_SORT_KEYS

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

TOOLS = [
    Tool(
        name="memory_search",
        description="Search the memory snapshot. Supports \"exact phrases\", +required and -excluded terms, AND/OR/NOT, fuzzy matching, facet filters, sorting and grouping.",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Query text (empty matches everything)",
                    "default": "",
                },
                "types": {**_STRING_LIST, "description": "Only these record types"},
                "exclude_types": {**_STRING_LIST, "description": "Drop these record types"},
                "tags": {**_STRING_LIST, "description": "Match any of these tags"},
                "date_from": {
                    "type": "integer",
                    "description": "Created at or after (epoch milliseconds)",
                },
                "date_to": {
                    "type": "integer",
                    "description": "Created at or before (epoch milliseconds)",
                },
                "search_in": {
                    "type": "string",
                    "enum": VALID_SEARCH_IN,
                    "description": "Fields matched against the query (default: all)",
                    "default": "all",
                },
                "status": {**_STRING_LIST, "description": "Allowed status values"},
                "priority": {**_STRING_LIST, "description": "Allowed priority values"},
                "sentiment": {**_STRING_LIST, "description": "Allowed sentiment values"},
                "has_relationships": {
                    "type": "boolean",
                    "description": "Only records with (true) or without (false) relationships",
                },
                "sort": {
                    "type": "string",
                    "enum": VALID_SORT_KEYS,
                    "description": "Sort order (default: relevance)",
                    "default": "relevance",
                },
                "group_by": {
                    "type": "string",
                    "enum": VALID_GROUP_KEYS,
                    "description": "Grouping (default: none)",
                    "default": "none",
                },
                "fuzzy": {
                    "type": "boolean",
                    "description": "Allow fuzzy word matches (default: server setting)",
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum results (default: 20, range: 1-500)",
                    "default": 20,
                    "minimum": 1,
                    "maximum": 500,
                },
            },
        },
    ),
    Tool(
        name="memory_stats",
        description="Aggregate statistics: totals by type and tag, activity windows, average per day and most active day.",
        inputSchema={
            "type": "object",
            "properties": {},
        },
    ),
    Tool(
        name="memory_duplicates",
        description="Find clusters of records whose titles are near-duplicates.",
        inputSchema={
            "type": "object",
            "properties": {
                "threshold": {
                    "type": "number",
                    "description": "Title similarity threshold in [0, 1] (default: server setting, 0.85)",
                    "minimum": 0,
                    "maximum": 1,
                },
            },
        },
    ),
    Tool(
        name="memory_highlight",
        description="Mark the query's terms inside a piece of text.",
        inputSchema={
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "Text to highlight"},
                "query": {"type": "string", "description": "Query whose terms are marked"},
                "open_tag": {"type": "string", "default": "<mark>"},
                "close_tag": {"type": "string", "default": "</mark>"},
            },
            "required": ["text", "query"],
        },
    ),
]

TOOL_SCHEMAS = {tool.name: tool.inputSchema for tool in TOOLS}
