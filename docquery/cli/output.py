"""Rendering search results for the terminal."""

from collections.abc import Mapping
from typing import Any

import msgspec
from rich.console import Console
from rich.table import Table
from rich.text import Text

from docquery.engine import MatchResult

OPERATOR_DESCRIPTIONS = {
    "$eq": "Equal (string folding per options)",
    "$ne": "Not equal",
    "$gt": "Greater than, numeric",
    "$gte": "Greater than or equal, numeric",
    "$lt": "Less than, numeric",
    "$lte": "Less than or equal, numeric",
    "$in": "Any value in the operand list",
    "$nin": "No value in the operand list",
    "$exists": "Field is present (true) or absent (false)",
    "$regex": "Regular expression search",
    "$startsWith": "Literal prefix",
    "$endsWith": "Literal suffix",
    "$contains": "Literal substring",
    "$size": "Sequence length",
    "$fuzz": "Approximate substring match",
    "$date": "Timestamp comparison using the date operator option",
}


def format_cell(value: Any, max_width: int = 60) -> str:
    """Format a record value for a table cell."""
    if value is None:
        return ""
    if isinstance(value, str):
        text = value
    elif isinstance(value, (bool, int, float)):
        text = str(value).lower() if isinstance(value, bool) else str(value)
    else:
        text = msgspec.json.encode(value).decode()

    if len(text) > max_width:
        text = text[: max_width - 3] + "..."
    return text


def _columns(records: list[Any]) -> list[str]:
    columns = []
    seen = set()
    for record in records:
        if isinstance(record, Mapping):
            for key in record:
                if key not in seen:
                    seen.add(key)
                    columns.append(key)
    return columns


def render_table(
    console: Console, result: MatchResult, limit: int | None = None
) -> None:
    """Print matched records as a table followed by a summary line."""
    records = result.results[:limit] if limit else result.results
    columns = _columns(records)

    if records:
        table = Table(title="Matching records", show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="dim")
        if columns:
            for column in columns:
                table.add_column(str(column), overflow="fold")
        else:
            table.add_column("record", overflow="fold")

        for index, record in enumerate(records, start=1):
            if isinstance(record, Mapping) and columns:
                cells = [format_cell(record.get(column)) for column in columns]
            else:
                cells = [format_cell(record)]
            table.add_row(str(index), *(Text(cell) for cell in cells))

        console.print(table)
    else:
        console.print("[yellow]No records matched[/yellow]")

    console.print(
        f"[green]{result.total_results}[/green] of {result.total_scanned} "
        f"records matched in {result.execution_time_ms:.2f} ms"
    )
    if limit and result.total_results > limit:
        console.print(f"[dim]Showing first {limit} results[/dim]")


def render_json(result: MatchResult) -> str:
    """Render a result in its JSON wire form."""
    return msgspec.json.format(result.to_json(), indent=2).decode()


def render_operators(console: Console, names: list[str]) -> None:
    """Print the registered operators."""
    table = Table(title="Operators", show_header=True, header_style="bold")
    table.add_column("Operator", style="cyan")
    table.add_column("Description")

    for name in names:
        table.add_row(name, OPERATOR_DESCRIPTIONS.get(name, ""))

    console.print(table)
