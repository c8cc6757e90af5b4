"""magnetic-grid validate: Check a layout file against the grid rules."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from magnetic_grid.cli.show_cmd import read_layout
from magnetic_grid.exceptions import MagneticGridError
from magnetic_grid.layout.validator import validate_layout

console = Console()


def validate(
    file: Annotated[Path, typer.Argument(help="Layout file (JSON or YAML)")],
    strict: Annotated[bool, typer.Option("--strict", help="Treat warnings as errors")] = False,
) -> None:
    """Validate widths, bounds, row alignment and overlaps."""
    try:
        layout = read_layout(file)
        result = validate_layout(layout)

        for error in result.errors:
            console.print(f"  [red]x[/red] {error}")
        for warning in result.warnings:
            console.print(f"  [yellow]![/yellow] {warning}")

        if not result.valid or (strict and result.warnings):
            console.print(f"[red]Invalid:[/red] {file} ({len(result.errors)} error(s), {len(result.warnings)} warning(s))")
            raise typer.Exit(1)

        console.print(f"[green]Valid:[/green] {file} ({len(layout)} field(s))")

    except MagneticGridError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
