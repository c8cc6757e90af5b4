"""Main CLI application for magnetic-grid."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from magnetic_grid import __version__
from magnetic_grid.config import get_settings
from magnetic_grid.exceptions import ConfigurationError

app = typer.Typer(
    name="magnetic-grid",
    help="Plan drags, resizes and compaction on a 6-column magnetic grid layout.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"magnetic-grid {__version__}")
        raise typer.Exit()


def configure_logging(level: str | None = None) -> None:
    """Route package logging through rich at the configured level."""
    try:
        settings = get_settings(log_level=level) if level else get_settings()
    except ValueError as e:
        raise ConfigurationError(f"Invalid log level '{level}'") from e

    logger = logging.getLogger("magnetic_grid")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False, markup=False))
    logger.setLevel(settings.log_level_value)
    logger.propagate = False


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version.", callback=version_callback, is_eager=True
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Override MAGNETIC_GRID_LOG_LEVEL (DEBUG, INFO, ...)."
    ),
) -> None:
    """magnetic-grid: drag, drop and resize fields on a magnetic grid."""
    try:
        configure_logging(log_level)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


# Import and register commands
from magnetic_grid.cli.edit_cmd import compact_layout, drag, resize  # noqa: E402
from magnetic_grid.cli.init_cmd import init  # noqa: E402
from magnetic_grid.cli.show_cmd import show  # noqa: E402
from magnetic_grid.cli.validate_cmd import validate  # noqa: E402

app.command("show")(show)
app.command("validate")(validate)
app.command("drag")(drag)
app.command("resize")(resize)
app.command("compact")(compact_layout)
app.command("init")(init)


def main() -> None:
    """Entry point for the CLI."""
    app()
