"""magnetic-grid init: Write a starter layout file."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from magnetic_grid.cli.show_cmd import grid_table, write_layout
from magnetic_grid.layout.builder import demo_layout

console = Console()


def init(
    file: Annotated[Path, typer.Argument(help="Where to write the layout (.json, .yml or .yaml)")],
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file")] = False,
) -> None:
    """Write the five-field demo layout."""
    if file.exists() and not force:
        console.print(f"[red]File already exists:[/red] {file} (use --force to overwrite)")
        raise typer.Exit(1)

    layout = demo_layout()
    write_layout(file, layout)
    console.print(grid_table(layout, title=str(file)))
    console.print(f"[green]Wrote {len(layout)} field(s) to {file}[/green]")
