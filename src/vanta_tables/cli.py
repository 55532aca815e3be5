"""
CLI interface for vanta-tables.

Lists the available tables and their columns, and runs queries that print
one JSON object per row (JSON Lines) to stdout. Logs go to stderr.

Usage:
    vanta-tables tables
    vanta-tables columns vanta_user
    vanta-tables query vanta_user --where employment_status=CURRENT --limit 5
    vanta-tables query vanta_evidence --where audit_id=abc123 --columns id,name,status
"""

import argparse
import json
import sys
from datetime import date, datetime

from vanta_tables import __version__
from vanta_tables.config import get_settings
from vanta_tables.errors import VantaTablesError, build_error_message
from vanta_tables.logging_config import get_logger, log_with_context, setup_logging
from vanta_tables.plugin import VantaPlugin
from vanta_tables.tables.base import QueryContext, Row

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    """
    CLI main entry point.

    Args:
        argv: Arguments to parse (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = argparse.ArgumentParser(
        prog="vanta-tables",
        description="vanta-tables - query Vanta compliance data as tables",
    )
    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # tables command - parser not accessed directly but registered with subparsers
    _ = subparsers.add_parser(
        "tables",
        help="List available tables",
    )

    # columns command
    columns_parser = subparsers.add_parser(
        "columns",
        help="List the columns of a table",
    )
    _ = columns_parser.add_argument("table", type=str, help="Table name")

    # query command
    query_parser = subparsers.add_parser(
        "query",
        help="Query a table and print rows as JSON Lines",
    )
    _ = query_parser.add_argument("table", type=str, help="Table name")
    _ = query_parser.add_argument(
        "--where",
        action="append",
        default=[],
        metavar="COLUMN=VALUE",
        help="Equality qual (repeatable)",
    )
    _ = query_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum rows to return",
    )
    _ = query_parser.add_argument(
        "--columns",
        type=str,
        default=None,
        help="Comma-separated columns to return (default: all)",
    )

    args = parser.parse_args(argv)

    command: str | None = str(args.command) if args.command else None
    if not command:
        parser.print_help()
        return 1

    try:
        if command == "tables":
            return cmd_tables(args)
        if command == "columns":
            return cmd_columns(args)
        if command == "query":
            return cmd_query(args)
        print(f"Unknown command: {command}", file=sys.stderr)
        return 1

    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Command failed",
            command=command,
            error=str(e),
        )
        message = build_error_message(e) if isinstance(e, VantaTablesError) else str(e)
        print(f"Error: {message}", file=sys.stderr)
        return 1


def cmd_tables(args: argparse.Namespace) -> int:
    """Print table names and descriptions."""
    _ = args  # Unused but part of CLI interface
    for table in VantaPlugin().tables():
        print(f"{table.name}\t{table.description}")
    return 0


def cmd_columns(args: argparse.Namespace) -> int:
    """
    Print the columns of one table.

    Args:
        args: Command arguments

    Returns:
        Exit code
    """
    table = VantaPlugin().table(str(args.table))
    for column in table.columns:
        print(f"{column.name}\t{column.type}\t{column.description}")
    return 0


def cmd_query(args: argparse.Namespace) -> int:
    """
    Run a query and print each row as a JSON object.

    Args:
        args: Command arguments

    Returns:
        Exit code
    """
    try:
        quals = parse_quals(list(args.where or []))
    except ValueError as e:
        print(f"Invalid --where argument: {e}", file=sys.stderr)
        return 1

    columns = [c.strip() for c in str(args.columns).split(",") if c.strip()] if args.columns else None
    limit: int | None = int(args.limit) if args.limit is not None else None
    if limit is not None and limit < 0:
        print("--limit must not be negative", file=sys.stderr)
        return 1

    # Load configuration
    try:
        settings = get_settings()
    except Exception as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)

    plugin = VantaPlugin(settings=settings)
    context = QueryContext(quals=dict(quals), limit=limit, columns=columns)

    def emit(row: Row) -> None:
        print(json.dumps(row, default=_json_default), flush=True)

    try:
        _ = plugin.query(str(args.table), context, emit)
    finally:
        plugin.connection_manager.reset()
    return 0


def parse_quals(pairs: list[str]) -> dict[str, str]:
    """
    Parse ``column=value`` pairs.

    Raises:
        ValueError: If a pair has no "=" or an empty column name
    """
    quals: dict[str, str] = {}
    for pair in pairs:
        column, sep, value = pair.partition("=")
        column = column.strip()
        if not sep or not column:
            raise ValueError(f"expected COLUMN=VALUE, got '{pair}'")
        quals[column] = value
    return quals


def _json_default(value: object) -> object:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


if __name__ == "__main__":
    sys.exit(main())
