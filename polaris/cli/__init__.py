"""Command-line interface for polaris."""
