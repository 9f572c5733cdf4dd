"""CLI module for relational-to-document conversion.

Provides commands for listing profiles, inspecting the schema catalog and
generating the collection script.

Usage:
    rel2doc profiles
    DB_PROFILE=local rel2doc tables
    rel2doc --profile local generate --add STATE:simple --add CITY:embedded
    rel2doc --profile local generate --add PERSON --add ADDRESS:embedded --indexes --tree

Commands:
    profiles  - List available profiles
    tables    - Introspect and list catalog tables
    generate  - Build the dependency tree and print the collection script
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from rel2doc.config.loader import load_config
from rel2doc.factory import ProfileNotFoundError, get_adapter, load_catalog
from rel2doc.session import ConversionSession, TableSelection

# Status output goes to stderr; stdout carries the generated script
console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _config_path(args: argparse.Namespace) -> Path | None:
    return Path(args.config) if getattr(args, "config", None) else None


# ============================================================================
# Commands
# ============================================================================


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from rel2doc.toml.

    Reads only local TOML config -- no database calls.

    Returns:
        0 on success, 1 if rel2doc.toml not found.
    """
    try:
        config = load_config(_config_path(args))
    except FileNotFoundError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        table.add_row(name, profile.provider, profile.description or "")

    console.print(table)
    return 0


def cmd_tables(args: argparse.Namespace) -> int:
    """Introspect the database and list the catalog.

    Returns:
        0 on success, 1 on configuration or connection failure.
    """
    try:
        catalog = load_catalog(
            profile_name=args.profile,
            env_prefix=args.env_prefix,
            config_path=_config_path(args),
        )
    except (ProfileNotFoundError, FileNotFoundError, KeyError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] Connection failed: {escape(str(e))}")
        return 1

    table = Table(title="Schema Catalog", show_header=True, header_style="bold")
    table.add_column("Table", style="cyan")
    table.add_column("Primary key")
    table.add_column("Columns", style="dim")
    table.add_column("Foreign keys")

    for name in catalog.table_names:
        info = catalog.tables[name]
        fks = ", ".join(
            f"{', '.join(fk.columns)} -> {ref}" for ref, fk in sorted(info.foreign_keys.items())
        )
        table.add_row(name, ", ".join(info.primary_key), ", ".join(info.columns), fks)

    console.print(table)
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    """Build the dependency tree and print the collection script.

    Returns:
        0 if every table was generated, 1 otherwise.
    """
    try:
        selections = [TableSelection.parse(value) for value in args.add]
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    config_path = _config_path(args)
    try:
        config = load_config(config_path)
        catalog = load_catalog(
            profile_name=args.profile, env_prefix=args.env_prefix, config=config
        )
        adapter = get_adapter(
            profile_name=args.profile, env_prefix=args.env_prefix, config=config
        )
    except (ProfileNotFoundError, FileNotFoundError, KeyError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] Connection failed: {escape(str(e))}")
        return 1

    session = ConversionSession(catalog, adapter)
    try:
        try:
            session.add_all(selections)
        except ValueError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            return 1

        if args.tree:
            console.print("[bold]Dependency tree:[/bold]")
            console.print(session.preview(), markup=False, highlight=False)

        include_indexes = args.indexes or config.script.include_indexes
        result = session.generate(include_indexes=include_indexes)
    finally:
        session.close()

    sys.stdout.write(result.script)

    for table_name, error in result.errors.items():
        console.print(f"[bold red]x[/bold red] {table_name}: {escape(error)}")

    if result.success:
        console.print(
            f"[bold green]v[/bold green] Generated {len(result.tables)} collection(s)"
        )
        return 0
    return 1


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rel2doc",
        description="Convert a relational schema into a document collection script",
    )

    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="Profile name from rel2doc.toml (overrides DB_PROFILE)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to rel2doc.toml (default: ./rel2doc.toml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # profiles command
    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    # tables command
    p_tables = subparsers.add_parser("tables", help="Introspect and list catalog tables")
    p_tables.set_defaults(func=cmd_tables)

    # generate command
    p_generate = subparsers.add_parser(
        "generate",
        help="Build the dependency tree and print the collection script",
    )
    p_generate.add_argument(
        "--add",
        "-a",
        action="append",
        required=True,
        metavar="TABLE[:MODE]",
        help="Table to add, in order; MODE is simple, embedded, referenced or junction",
    )
    p_generate.add_argument(
        "--indexes",
        action="store_true",
        help="Append createIndex statements for primary and unique keys",
    )
    p_generate.add_argument(
        "--tree",
        action="store_true",
        help="Print the dependency tree to stderr before generating",
    )
    p_generate.set_defaults(func=cmd_generate)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
