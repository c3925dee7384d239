"""CLI module for dependency-ordered database snapshots.

Provides commands to dump a database into a replayable SQL script, to show
the foreign-key dependency order, and to list configured profiles.

Usage:
    db-snapshot dump
    db-snapshot dump --profile local --output-dir backups --batch-size 500
    DB_SNAPSHOT_PROFILE=prod db-snapshot dump -o prod.sql
    db-snapshot order --profile local
    db-snapshot profiles

Commands:
    dump      - Write a full schema + data snapshot
    order     - Show tables in dependency order (or the cycle)
    profiles  - List available profiles
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from db_snapshot.config.loader import load_db_config
from db_snapshot.config.models import SnapshotConfig
from db_snapshot.errors import SnapshotError
from db_snapshot.factory import (
    ProfileNotFoundError,
    get_source,
    load_config_or_default,
)
from db_snapshot.schema.sorter import order_tables
from db_snapshot.snapshot.exporter import discover_graph, write_snapshot
from db_snapshot.snapshot.sinks import FileSink
from db_snapshot.sources.sql import SqlSnapshotSource

console = Console()

# Errors that mean "could not set up a source" rather than "export failed"
_SETUP_ERRORS = (ProfileNotFoundError, FileNotFoundError, ValueError, ImportError, SQLAlchemyError)


def dump_filename(schema_name: str, now: datetime | None = None) -> str:
    """Timestamped snapshot file name, e.g. ``app_dump_20240115103000.sql``."""
    now = now or datetime.now(timezone.utc)
    return f"{schema_name}_dump_{now:%Y%m%d%H%M%S}.sql"


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _open_source(args: argparse.Namespace) -> tuple[SnapshotConfig, SqlSnapshotSource]:
    """Load configuration and create the source for the selected profile."""
    config_path = Path(args.config) if getattr(args, "config", None) else None
    config = load_config_or_default(config_path)
    source = get_source(
        getattr(args, "profile", None), config, getattr(args, "schema", None)
    )
    return config, source


# ============================================================================
# Commands
# ============================================================================


def cmd_dump(args: argparse.Namespace) -> int:
    """Write a snapshot of the selected database.

    Output goes to ``<file>.partial`` and is renamed only when the whole
    snapshot has been written.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success, 1 on failure, 130 if interrupted.
    """
    try:
        config, source = _open_source(args)
    except _SETUP_ERRORS as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    settings = config.snapshot
    batch_size = args.batch_size or settings.batch_size

    with source:
        try:
            schema_name = source.default_schema
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            return 1

        if args.output:
            output_path = Path(args.output)
        else:
            output_dir = Path(args.output_dir or settings.output_dir)
            output_path = output_dir / dump_filename(schema_name)

        console.print(
            f"Dumping [bold cyan]{schema_name}[/bold cyan] "
            f"([dim]{source.dialect.name}[/dim]) to {output_path}",
        )

        sink = FileSink(output_path)
        try:
            summary = write_snapshot(
                schema_name,
                source,
                source,
                sink,
                dialect=source.dialect,
                batch_size=batch_size,
                exclude_tables=settings.exclude_tables,
            )
            final_path = sink.commit()
        except (SnapshotError, ValueError) as e:
            partial = sink.abort()
            console.print()
            console.print(f"[bold red]x[/bold red] Snapshot failed: {e}")
            if partial:
                console.print(
                    f"[dim]Incomplete output kept at[/dim] {partial} "
                    f"[dim](not a usable snapshot)[/dim]"
                )
            return 1
        except KeyboardInterrupt:
            partial = sink.abort()
            console.print("\n[yellow]Cancelled.[/yellow]")
            if partial:
                console.print(f"[dim]Incomplete output kept at[/dim] {partial}")
            return 130

    table = Table(title="Snapshot Summary", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Table")
    table.add_column("Rows", justify="right")
    for position, name in enumerate(summary.table_order, 1):
        table.add_row(str(position), name, str(summary.row_counts.get(name, 0)))

    console.print()
    console.print(table)
    console.print(
        f"[bold green]v[/bold green] Wrote {len(summary.table_order)} tables, "
        f"{summary.total_rows} rows ({summary.insert_statements} INSERT statements)"
    )
    console.print(f"  File: [bold]{final_path}[/bold]")
    console.print(f"  Checksum: [dim]{sink.checksum_path}[/dim]")
    return 0


def cmd_order(args: argparse.Namespace) -> int:
    """Show tables in dependency order without dumping data.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 if an order exists, 1 on a cycle or error.
    """
    try:
        config, source = _open_source(args)
    except _SETUP_ERRORS as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    with source:
        try:
            schema_name = source.default_schema
            graph = discover_graph(
                schema_name, source, config.snapshot.exclude_tables
            )
        except (SnapshotError, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")
            return 1

    result = order_tables(graph)
    if not result.success:
        console.print(f"[bold red]x[/bold red] {result.error}")
        return 1

    table = Table(
        title=f"Dependency Order: {schema_name}", show_header=True, header_style="bold"
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Table")
    table.add_column("References")
    self_refs = set(graph.self_referencing())
    for position, name in enumerate(result.order, 1):
        refs = ", ".join(graph.dependencies_of(name))
        if name in self_refs:
            name = f"{name} [dim](self)[/dim]"
        table.add_row(str(position), name, refs)

    console.print(table)
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Reads only local TOML config -- no database calls.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success, 1 if db.toml not found.
    """
    config_path = Path(args.config) if args.config else None
    try:
        config = load_db_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    table = Table(
        title="Database Profiles", show_header=True, header_style="bold"
    )
    table.add_column("Profile")
    table.add_column("Schema")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        table.add_row(name, profile.schema_name or "", profile.description or "")

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--profile",
        "-p",
        help="Profile name from db.toml (default: DB_SNAPSHOT_PROFILE)",
    )
    parser.add_argument(
        "--schema",
        "-s",
        help="Schema to export (default: the profile's database)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="db-snapshot",
        description="Dependency-ordered database snapshot exporter",
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to db.toml (default: ./db.toml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Log progress (-v) or debug detail (-vv)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # dump command
    p_dump = subparsers.add_parser(
        "dump",
        help="Write a full schema + data snapshot",
    )
    _add_source_arguments(p_dump)
    p_dump.add_argument(
        "--output-dir",
        "-d",
        help="Directory for timestamped dump files (default: database_dumps)",
    )
    p_dump.add_argument(
        "--output",
        "-o",
        help="Exact output file path (overrides --output-dir)",
    )
    p_dump.add_argument(
        "--batch-size",
        "-b",
        type=int,
        help="Rows per INSERT statement (default: 100)",
    )
    p_dump.set_defaults(func=cmd_dump)

    # order command
    p_order = subparsers.add_parser(
        "order",
        help="Show tables in dependency order",
    )
    _add_source_arguments(p_order)
    p_order.set_defaults(func=cmd_order)

    # profiles command
    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    args = parser.parse_args(argv)

    if getattr(args, "batch_size", None) is not None and args.batch_size < 1:
        parser.error("--batch-size must be at least 1")

    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
