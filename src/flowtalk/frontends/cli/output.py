"""Output formatting utilities for CLI commands."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any, NoReturn

import rich_click as click

if TYPE_CHECKING:
    from collections.abc import Callable


def print_table(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int] | None = None,
    separator_width: int = 70,
) -> None:
    """Print a formatted table with headers.

    Args:
        headers: Column header strings
        rows: List of rows, each row is a list of cell values
        widths: Optional column widths. If None, fits the widest cell.
        separator_width: Width of the separator line
    """
    if widths is None:
        widths = [
            max([len(headers[i])] + [len(row[i]) for row in rows if i < len(row)])
            for i in range(len(headers))
        ]

    # Last column doesn't need padding
    fmt = " ".join(
        "{}" if i == len(widths) - 1 else f"{{:<{width}}}" for i, width in enumerate(widths)
    )

    click.echo(fmt.format(*headers))
    click.echo("-" * separator_width)

    for row in rows:
        padded_row = list(row) + [""] * (len(headers) - len(row))
        click.echo(fmt.format(*padded_row[: len(headers)]))


def output_json(data: Any, indent: int = 2) -> None:
    """Output data as formatted JSON."""
    click.echo(json.dumps(data, indent=indent, default=str))


def output_json_or_table(
    data: Any,
    json_flag: bool,
    table_fn: Callable[[], None],
) -> None:
    """Output as JSON if flag is set, otherwise call table function."""
    if json_flag:
        output_json(data)
    else:
        table_fn()


def error_exit(message: str, code: int = 1) -> NoReturn:
    """Print error message and exit with code."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)
