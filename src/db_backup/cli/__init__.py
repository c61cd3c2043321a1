"""CLI module for inspecting backup artifacts.

Provides read-only commands over TOC files, metadata dumps, and the
backup history of a backup directory.

Usage:
    db-backup toc backups/20240101/20240101120000/gpbackup_20240101120000_toc.json
    db-backup statements TOC_FILE METADATA_FILE --section predata --include-table public.orders
    db-backup statements TOC_FILE METADATA_FILE --section global --rename-database sales sales_copy
    db-backup history --backup-dir /data/backups
    db-backup plan 20240102120000 --backup-dir /data/backups

Commands:
    toc         - Summarize the sections and data entries of a TOC
    statements  - Print statements from a metadata dump, filtered via its TOC
    history     - List recorded backups
    plan        - Show the restore plan of one backup
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from db_backup.config.models import BackupPaths
from db_backup.errors import BackupError
from db_backup.history.history import load_history
from db_backup.toc.models import Section
from db_backup.toc.statements import (
    remove_active_role,
    statements_for_types,
    substitute_redirect_database,
)
from db_backup.toc.toc import load_toc

console = Console()


def _configure_logging(verbose: bool) -> None:
    """Send log records through rich, at DEBUG with ``-v``."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# ============================================================================
# Command implementations
# ============================================================================


def cmd_toc(args: argparse.Namespace) -> int:
    """Summarize a TOC file.

    Args:
        args: Parsed arguments with toc_file.

    Returns:
        0 always (informational command).
    """
    toc = load_toc(args.toc_file)

    table = Table(title=f"TOC: {Path(args.toc_file).name}", show_header=True, header_style="bold")
    table.add_column("Section")
    table.add_column("Entries", justify="right")
    table.add_column("Bytes", justify="right")

    for section in Section:
        entries = toc.entries_for(section)
        size = sum(e.end_byte - e.start_byte for e in entries)
        table.add_row(section.value, str(len(entries)), str(size))

    console.print(table)
    console.print(f"  Data entries: [cyan]{len(toc.data_entries)}[/cyan]")
    console.print(
        f"  AO tables with incremental metadata: "
        f"[cyan]{len(toc.incremental_metadata.ao)}[/cyan]"
    )
    return 0


def cmd_statements(args: argparse.Namespace) -> int:
    """Print filtered statements from a metadata dump.

    Args:
        args: Parsed arguments with toc_file, metadata_file, and filters.

    Returns:
        0 on success (including when nothing matches).
    """
    toc = load_toc(args.toc_file)

    with open(args.metadata_file, "rb") as f:
        statements = statements_for_types(
            toc,
            args.section,
            f,
            include_types=args.include_type,
            exclude_types=args.exclude_type,
            include_schemas=args.include_schema,
            include_tables=args.include_table,
        )

    if args.rename_database:
        old_name, new_name = args.rename_database
        statements = substitute_redirect_database(statements, old_name, new_name)
    if args.active_role:
        statements = remove_active_role(args.active_role, statements)

    if not statements:
        console.print("[yellow]No matching statements.[/yellow]")
        return 0

    for statement in statements:
        # Raw SQL, never wrapped or styled
        sys.stdout.write(statement.statement)
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """List the backups recorded under a backup directory.

    Args:
        args: Parsed arguments with backup_dir.

    Returns:
        0 always (informational command).
    """
    paths = BackupPaths(backup_dir=Path(args.backup_dir))
    history = load_history(paths.history_path)

    if not history.backup_configs:
        console.print("[yellow]No backups recorded.[/yellow]")
        return 0

    table = Table(title="Backup History", show_header=True, header_style="bold")
    table.add_column("Timestamp")
    table.add_column("Database")
    table.add_column("Type")
    table.add_column("Plugin")
    table.add_column("Tables in plan", justify="right")

    for config in history.backup_configs:
        table.add_row(
            f"[bold cyan]{config.timestamp}[/bold cyan]",
            escape(config.database_name),
            "incremental" if config.incremental else "full",
            escape(config.plugin),
            str(sum(len(e.table_fqns) for e in config.restore_plan)),
        )

    console.print(table)
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Show which backup holds each table's data for one backup.

    Args:
        args: Parsed arguments with timestamp and backup_dir.

    Returns:
        0 on success, 1 if the timestamp is not in the history.
    """
    paths = BackupPaths(backup_dir=Path(args.backup_dir))
    history = load_history(paths.history_path)

    config = history.find_backup_config(args.timestamp)
    if config is None:
        console.print(f"[red]Error: no backup with timestamp {escape(args.timestamp)}[/red]")
        return 1

    table = Table(title=f"Restore Plan: {args.timestamp}", show_header=True, header_style="bold")
    table.add_column("Backup")
    table.add_column("Tables")

    for entry in config.restore_plan:
        table.add_row(entry.timestamp, escape("\n".join(entry.table_fqns)) or "[dim](none)[/dim]")

    console.print(table)
    return 0


def main() -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="db-backup",
        description="Inspect backup TOCs, metadata dumps, and restore plans",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # toc command
    p_toc = subparsers.add_parser(
        "toc",
        help="Summarize the sections and data entries of a TOC",
    )
    p_toc.add_argument("toc_file", help="Path to a TOC file")
    p_toc.set_defaults(func=cmd_toc)

    # statements command
    p_statements = subparsers.add_parser(
        "statements",
        help="Print statements from a metadata dump, filtered via its TOC",
    )
    p_statements.add_argument("toc_file", help="Path to the backup's TOC file")
    p_statements.add_argument("metadata_file", help="Path to the backup's metadata dump")
    p_statements.add_argument(
        "--section",
        choices=[s.value for s in Section],
        default=Section.PREDATA.value,
        help="Section to read (default: predata)",
    )
    p_statements.add_argument(
        "--include-type",
        action="append",
        default=[],
        help="Object type to include (repeatable)",
    )
    p_statements.add_argument(
        "--exclude-type",
        action="append",
        default=[],
        help="Object type to exclude (repeatable)",
    )
    p_statements.add_argument(
        "--include-schema",
        action="append",
        default=[],
        help="Schema to include (repeatable)",
    )
    p_statements.add_argument(
        "--include-table",
        action="append",
        default=[],
        help="Table FQN to include, with its dependent objects (repeatable)",
    )
    p_statements.add_argument(
        "--rename-database",
        nargs=2,
        metavar=("OLD", "NEW"),
        help="Rewrite database-level statements from OLD to NEW",
    )
    p_statements.add_argument(
        "--active-role",
        help="Drop role statements for this (connected) role",
    )
    p_statements.set_defaults(func=cmd_statements)

    # history command
    p_history = subparsers.add_parser(
        "history",
        help="List recorded backups",
    )
    p_history.add_argument("--backup-dir", required=True, help="Backup directory")
    p_history.set_defaults(func=cmd_history)

    # plan command
    p_plan = subparsers.add_parser(
        "plan",
        help="Show the restore plan of one backup",
    )
    p_plan.add_argument("timestamp", help="Backup timestamp (YYYYMMDDHHMMSS)")
    p_plan.add_argument("--backup-dir", required=True, help="Backup directory")
    p_plan.set_defaults(func=cmd_plan)

    args = parser.parse_args()
    _configure_logging(args.verbose)

    try:
        return args.func(args)
    except (BackupError, OSError) as e:
        console.print(f"[bold red]x[/bold red] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
