from pathlib import Path
from typing import Optional

import typer

from travelmap.cli import commands
from travelmap.errors import TravelMapError
from travelmap.logging_config import setup_logging
from travelmap.pipeline import DEFAULT_CONFIG, DEFAULT_CONNECTIONS, DEFAULT_LOCATIONS

app = typer.Typer(add_completion=False, help="Draw visited countries and trips on a world map.")

LOCATIONS_OPTION = typer.Option(
    DEFAULT_LOCATIONS, "--locations", exists=True, dir_okay=False, readable=True,
    help="Location table: id lon lat name",
)
CONNECTIONS_OPTION = typer.Option(
    DEFAULT_CONNECTIONS, "--connections", exists=True, dir_okay=False, readable=True,
    help="Connection table: from to weight category",
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    setup_logging("DEBUG" if verbose else "WARNING")


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command("render")
def render(
    locations: Path = LOCATIONS_OPTION,
    connections: Path = CONNECTIONS_OPTION,
    basemap: Optional[Path] = typer.Option(
        None, "--basemap", exists=True, dir_okay=False, readable=True,
        help="Polygon CSV (long, lat, group[, order]); defaults to the TopoJSON world map",
    ),
    config: Optional[Path] = typer.Option(
        DEFAULT_CONFIG, "--config", exists=True, dir_okay=False, readable=True,
        help="Render config YAML",
    ),
    output: Path = typer.Option(Path("travel_map.png"), "--output", "-o", dir_okay=False),
) -> None:
    """Render the travel map image."""
    try:
        path = commands.render(locations, connections, basemap, config, output)
    except (TravelMapError, ValueError) as exc:
        _fail(exc)
    typer.echo(f"Rendered {path}")


@app.command("degrees")
def degrees(
    locations: Path = LOCATIONS_OPTION,
    connections: Path = CONNECTIONS_OPTION,
) -> None:
    """Show each location's degree (node size)."""
    try:
        df = commands.degree_table(locations, connections)
    except TravelMapError as exc:
        _fail(exc)
    for line in commands.print_degrees(df):
        typer.echo(line)


@app.command("segments")
def segments(
    locations: Path = LOCATIONS_OPTION,
    connections: Path = CONNECTIONS_OPTION,
    fmt: str = typer.Option("csv", help="csv or parquet"),
    output: Optional[Path] = typer.Option(None, dir_okay=False),
) -> None:
    """Export the segment table."""
    try:
        path = commands.export_segments(locations, connections, fmt, output)
    except (TravelMapError, ValueError) as exc:
        _fail(exc)
    typer.echo(f"Exported {path}")


@app.command("validate")
def validate(
    locations: Path = LOCATIONS_OPTION,
    connections: Path = CONNECTIONS_OPTION,
) -> None:
    """Check that both tables load and every connection resolves."""
    try:
        summary = commands.validate(locations, connections)
    except TravelMapError as exc:
        _fail(exc)
    for line in commands.print_validation_summary(summary):
        typer.echo(line)


if __name__ == "__main__":
    app()
