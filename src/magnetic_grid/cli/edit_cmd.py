"""magnetic-grid drag/resize/compact: Apply layout operations to a file."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from magnetic_grid.cli.show_cmd import grid_table, read_layout, write_layout
from magnetic_grid.config import get_settings
from magnetic_grid.exceptions import MagneticGridError, UnknownFieldError
from magnetic_grid.grid.constants import GRID
from magnetic_grid.grid.geometry import describe
from magnetic_grid.grid.models import Layout, ResizeEdge
from magnetic_grid.layout.compactor import compact, expansion_plan, pull_up
from magnetic_grid.layout.planner import plan_placement
from magnetic_grid.layout.resize import ResizeController

console = Console()


def _require_visible(field_id: str, layout: Layout) -> None:
    if field_id not in layout:
        raise UnknownFieldError(field_id, sorted(layout))
    if not layout[field_id].is_visible:
        console.print(f"[red]Field '{field_id}' is hidden.[/red]")
        raise typer.Exit(1)


def _finish(layout: Layout, output: Path | None, title: str) -> None:
    console.print(grid_table(layout, title=title))
    if output:
        write_layout(output, layout)
        console.print(f"[green]Written to {output}[/green]")


def drag(
    file: Annotated[Path, typer.Argument(help="Layout file (JSON or YAML)")],
    field_id: Annotated[str, typer.Argument(help="Field to drag")],
    row: Annotated[int, typer.Argument(help="Target row (0-based)")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write the result here")] = None,
    no_compact: Annotated[bool, typer.Option("--no-compact", help="Skip pull-up and auto-expand")] = False,
) -> None:
    """Drop a field on a row: resize, place directly or push down, then compact."""
    try:
        layout = read_layout(file)
        _require_visible(field_id, layout)

        plan = plan_placement(field_id, row, layout)
        if plan is None:
            console.print(f"[red]Nothing to plan for '{field_id}'.[/red]")
            raise typer.Exit(1)

        console.print(f"[bold]Strategy:[/bold] {plan.strategy.value}")
        console.print(f"  {plan.summary()}")
        if plan.resized:
            console.print(f"  width {layout[field_id].width:.4f} -> {plan.width:.4f}")

        result = plan.layout if no_compact else compact(plan.layout)
        console.print(f"  [dim]{field_id}: {describe(result[field_id])}[/dim]")
        _finish(result, output, title=f"After dragging {field_id} to row {row}")

    except MagneticGridError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def resize(
    file: Annotated[Path, typer.Argument(help="Layout file (JSON or YAML)")],
    field_id: Annotated[str, typer.Argument(help="Field to resize")],
    edge: Annotated[ResizeEdge, typer.Option("--edge", "-e", help="Edge to drag")] = ResizeEdge.RIGHT,
    steps: Annotated[int, typer.Option("--steps", "-s", help="Width steps; negative narrows")] = 1,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write the result here")] = None,
) -> None:
    """Drag a field edge by whole width steps and resolve the result."""
    try:
        layout = read_layout(file)
        _require_visible(field_id, layout)

        container_width = get_settings().container_width
        controller = ResizeController()
        controller.start(field_id, edge, layout)

        # One threshold's worth of pointer travel per step
        direction = (1 if steps > 0 else -1) * (1 if edge is ResizeEdge.RIGHT else -1)
        delta = direction * container_width * GRID.accumulation_threshold

        for i in range(abs(steps)):
            stepped = controller.move(field_id, delta, layout, container_width)
            if stepped is None:
                console.print(f"[yellow]No further width step after {i} step(s).[/yellow]")
                break
            layout = {**layout, field_id: stepped}
            console.print(f"  step {i + 1}: {describe(stepped)}")

        resolution = controller.end(field_id, layout)
        if resolution is None:
            console.print(f"[red]Resize of '{field_id}' could not be resolved.[/red]")
            raise typer.Exit(1)

        color = "yellow" if resolution.reverted else "green"
        console.print(f"[{color}]Outcome:[/{color}] {resolution.outcome.value}")
        layout = {**layout, field_id: resolution.placement}
        _finish(layout, output, title=f"After resizing {field_id}")

    except MagneticGridError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def compact_layout(
    file: Annotated[Path, typer.Argument(help="Layout file (JSON or YAML)")],
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would change without writing")] = False,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write here instead of FILE")] = None,
) -> None:
    """Pull rows up and expand fields into leftover row space."""
    try:
        layout = read_layout(file)
        pulled = pull_up(layout)
        moved = sorted(fid for fid, p in pulled.items() if not p.same_geometry(layout[fid]))

        if dry_run:
            if moved:
                console.print(f"[bold]Pull-up moves:[/bold] {', '.join(moved)}")
            else:
                console.print("[dim]Pull-up: no empty rows.[/dim]")

            table = Table(title="Auto-expand")
            table.add_column("Row", justify="right")
            table.add_column("Strategy", style="cyan")
            table.add_column("Free", justify="right")
            table.add_column("Changes")
            for expansion in expansion_plan(pulled):
                changes = ", ".join(f"{fid} -> {describe(p)}" for fid, p in expansion.updates.items())
                table.add_row(
                    str(expansion.row), expansion.strategy, f"{expansion.free_space:.0%}", changes or "[dim]none[/dim]"
                )
            console.print(table)
            return

        result = compact(layout)
        _finish(result, output or file, title="Compacted")

    except MagneticGridError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
