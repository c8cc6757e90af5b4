"""magnetic-grid show: Render a layout file as a grid."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from magnetic_grid.exceptions import MagneticGridError
from magnetic_grid.grid.collision import group_by_row
from magnetic_grid.grid.constants import GRID
from magnetic_grid.grid.geometry import column_of, column_span, describe
from magnetic_grid.grid.models import Layout, ordered
from magnetic_grid.layout.serializer import LayoutSerializer

console = Console()


def read_layout(path: Path) -> Layout:
    """Load a JSON or YAML layout file, exiting with a message if it is missing."""
    if not path.exists():
        console.print(f"[red]File not found:[/red] {path}")
        raise typer.Exit(1)
    fmt = "yaml" if path.suffix in (".yml", ".yaml") else "auto"
    return LayoutSerializer.loads(path.read_text(encoding="utf-8"), fmt=fmt)


def write_layout(path: Path, layout: Layout) -> None:
    """Write ``layout`` as YAML for .yml/.yaml paths, JSON otherwise."""
    if path.suffix in (".yml", ".yaml"):
        content = LayoutSerializer.to_yaml(layout)
    else:
        content = LayoutSerializer.to_json(layout) + "\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def grid_table(layout: Layout, title: str = "Grid") -> Table:
    """One table row per grid row, one column per grid column."""
    table = Table(title=title, show_lines=True)
    table.add_column("Row", justify="right", style="dim")
    for col in range(GRID.columns):
        table.add_column(str(col), style="cyan", justify="center")

    for row, placements in group_by_row(layout).items():
        cells = [""] * GRID.columns
        for p in placements:
            start = column_of(p.position.x)
            for col in range(start, start + column_span(p.width, start)):
                cells[col] = f"{cells[col]}+{p.id}" if cells[col] else p.id
        table.add_row(str(row), *cells)
    return table


def fields_table(layout: Layout) -> Table:
    table = Table(title="Fields")
    table.add_column("Field", style="cyan")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("Width", justify="right")
    table.add_column("Location", style="dim")
    for p in ordered(layout):
        table.add_row(p.id, f"{p.position.x:.4f}", f"{p.position.y:g}", f"{p.width:.4f}", describe(p))
    return table


def show(
    file: Annotated[Path, typer.Argument(help="Layout file (JSON or YAML)")],
    fmt: Annotated[str, typer.Option("--format", "-f", help="Output: grid, json or yaml")] = "grid",
) -> None:
    """Show a layout file as a grid, or re-serialized as JSON/YAML."""
    try:
        valid_formats = ("grid", "json", "yaml")
        if fmt not in valid_formats:
            console.print(f"[red]Invalid format '{fmt}'. Choose from: {', '.join(valid_formats)}[/red]")
            raise typer.Exit(1)

        layout = read_layout(file)

        if fmt == "json":
            console.print_json(LayoutSerializer.to_json(layout))
        elif fmt == "yaml":
            console.print(Syntax(LayoutSerializer.to_yaml(layout), "yaml", theme="monokai", line_numbers=True))
        else:
            console.print(grid_table(layout, title=str(file)))
            console.print(fields_table(layout))
            hidden = [p.id for p in layout.values() if not p.is_visible]
            if hidden:
                console.print(f"[dim]Hidden: {', '.join(sorted(hidden))}[/dim]")

    except MagneticGridError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
