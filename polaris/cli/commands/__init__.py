"""CLI command modules for polaris.

Each handler has the signature ``cmd_x(args, records, now, config)``.
"""

from polaris.cli.commands.duplicates import cmd_duplicates
from polaris.cli.commands.export import cmd_export
from polaris.cli.commands.helpers import (
    add_filter_arguments,
    build_filter,
    parse_date_arg,
    print_json,
    validate_input,
)
from polaris.cli.commands.search import cmd_search
from polaris.cli.commands.stats import cmd_stats

__all__ = [
    "add_filter_arguments",
    "build_filter",
    "cmd_duplicates",
    "cmd_export",
    "cmd_search",
    "cmd_stats",
    "parse_date_arg",
    "print_json",
    "validate_input",
]
