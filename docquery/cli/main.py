"""Main CLI entry point and application setup."""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
from click.exceptions import Exit
from rich.console import Console
from rich.markup import escape

from docquery import __version__
from docquery.cli.config import load_config, options_from_config
from docquery.cli.output import render_json, render_operators, render_table
from docquery.cli.records import load_records, parse_query
from docquery.core.exceptions import QueryError
from docquery.core.matcher import QueryMatcher
from docquery.core.options import DATE_COMPARISON_OPERATORS, MatchOptions
from docquery.engine import SearchEngine


@dataclass
class Context:
    """CLI context that holds shared resources."""

    console: Console
    config: dict[str, Any] = field(default_factory=dict)
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def build_options(
    config: dict[str, Any],
    ignore_case: bool,
    ignore_accents: bool,
    fuzzy_threshold: float | None,
    date_operator: str | None,
) -> MatchOptions:
    """Merge configured options with command-line flags (flags win)."""
    options = options_from_config(config)
    if ignore_case:
        options["ignoreCase"] = True
    if ignore_accents:
        options["ignoreAccents"] = True
    if fuzzy_threshold is not None:
        options["fuzzyThreshold"] = fuzzy_threshold
    if date_operator is not None:
        options["dateComparisonOperator"] = date_operator
    return MatchOptions.from_mapping(options)


class DocQueryGroup(click.Group):
    """Custom group that handles KeyboardInterrupt and unexpected errors."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=DocQueryGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(
    version=__version__, prog_name="docquery", message="docquery version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """Filter JSON or YAML records with document-style queries.

    Queries map field paths to literals or operator maps, for example
    '{"age": {"$gte": 26}, "address.city": "Lisbon"}'.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    try:
        config_data = load_config(config)
    except ValueError as e:
        if debug:
            raise
        click.echo(f"Error loading config: {e}", err=True)
        ctx.exit(1)

    ctx.obj = Context(
        console=create_console(no_color=no_color),
        config=config_data,
        debug=debug,
    )


@cli.command()
@click.argument(
    "records_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("query")
@click.option("--ignore-case", "-i", is_flag=True, help="Case-insensitive strings")
@click.option("--ignore-accents", "-a", is_flag=True, help="Ignore diacritics")
@click.option(
    "--fuzzy-threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Minimum score for $fuzz (default 0.8)",
)
@click.option(
    "--date-operator",
    type=click.Choice(sorted(DATE_COMPARISON_OPERATORS)),
    default=None,
    help="Comparison applied by $date (default $eq)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--limit", "-n", type=click.IntRange(min=1), help="Rows to display")
@click.pass_context
def search(
    ctx: click.Context,
    records_file: Path,
    query: str,
    ignore_case: bool,
    ignore_accents: bool,
    fuzzy_threshold: float | None,
    date_operator: str | None,
    output_format: str,
    limit: int | None,
) -> None:
    """Search RECORDS_FILE with QUERY (JSON text or @file)."""
    console = ctx.obj.console

    try:
        query_expr = parse_query(query)
        options = build_options(
            ctx.obj.config, ignore_case, ignore_accents, fuzzy_threshold, date_operator
        )
        records = load_records(records_file)
        result = SearchEngine(records).search(query_expr, options)
    except (QueryError, ValueError) as e:
        if ctx.obj.debug:
            raise
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        ctx.exit(1)

    if output_format == "json":
        click.echo(render_json(result))
    else:
        render_table(console, result, limit=limit)


@cli.command()
@click.argument("query")
@click.pass_context
def validate(ctx: click.Context, query: str) -> None:
    """Check that QUERY (JSON text or @file) is well formed."""
    console = ctx.obj.console

    try:
        QueryMatcher().validate(parse_query(query))
    except QueryError as e:
        if ctx.obj.debug:
            raise
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        ctx.exit(1)

    console.print("[green]✓[/green] Query is valid")


@cli.command()
@click.pass_context
def operators(ctx: click.Context) -> None:
    """List supported query operators."""
    render_operators(ctx.obj.console, QueryMatcher().registry.names())


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
