"""MCP server exposing polaris search tools."""
