"""End-to-end travel map run: load, validate, build, annotate, join, render."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import altair as alt
import pandas as pd

from travelmap.logging_config import get_logger
from travelmap.render.chart import build_map_chart, save_map
from travelmap.render.config import RenderConfig
from travelmap.services.basemap import load_basemap
from travelmap.services.graph import annotate_locations, build_travel_graph, node_degrees
from travelmap.services.segments import SegmentTable, join_segments
from travelmap.tables import (
    ConnectionTable,
    LocationTable,
    check_references,
    load_connections,
    load_locations,
)

logger = get_logger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_LOCATIONS = DATA_DIR / "locations.txt"
DEFAULT_CONNECTIONS = DATA_DIR / "connections.txt"
DEFAULT_CONFIG = DATA_DIR / "render.yaml"

PathLike = Union[str, Path]


@dataclass(frozen=True)
class PreparedTables:
    """Everything the renderer needs, derived from one pair of input tables."""
    locations: LocationTable
    connections: ConnectionTable
    degrees: Dict[int, int]
    nodes: pd.DataFrame  # locations + weight (degree)
    segments: SegmentTable


@dataclass(frozen=True)
class TravelMapResult:
    prepared: PreparedTables
    chart: alt.LayerChart
    output_path: Optional[Path] = None


def load_tables(
    locations_path: PathLike = DEFAULT_LOCATIONS,
    connections_path: PathLike = DEFAULT_CONNECTIONS,
) -> Tuple[LocationTable, ConnectionTable]:
    """Load both tables and check connection references."""
    locations = load_locations(locations_path)
    connections = load_connections(connections_path)
    check_references(locations, connections)
    logger.info("Loaded %d locations and %d connections", len(locations), len(connections))
    return locations, connections


def prepare(locations: LocationTable, connections: ConnectionTable) -> PreparedTables:
    """Build the graph, annotate node degrees and join segments.

    Raises:
        ValidationError: If a connection references an unknown location
        FatalAssertionError: If the segment join changed the row count
    """
    graph = build_travel_graph(locations, connections)
    degrees = node_degrees(graph)
    nodes = annotate_locations(locations, degrees)
    segments = join_segments(locations, connections)
    logger.info("Prepared %d nodes and %d segments", len(nodes), len(segments))
    return PreparedTables(
        locations=locations,
        connections=connections,
        degrees=degrees,
        nodes=nodes,
        segments=segments,
    )


def run(
    locations_path: PathLike = DEFAULT_LOCATIONS,
    connections_path: PathLike = DEFAULT_CONNECTIONS,
    basemap_path: Optional[PathLike] = None,
    config: Optional[RenderConfig] = None,
    output_path: Optional[PathLike] = None,
) -> TravelMapResult:
    """Run the pipeline; the image is written only after every stage succeeded.

    Args:
        locations_path: Location table (id lon lat name)
        connections_path: Connection table (from to weight category)
        basemap_path: Optional polygon CSV; None uses the TopoJSON world map
        config: Render settings, defaults when None
        output_path: Image destination; None builds the chart without saving

    Returns:
        TravelMapResult with the prepared tables, the chart and the output path
    """
    config = config or RenderConfig()
    locations, connections = load_tables(locations_path, connections_path)
    prepared = prepare(locations, connections)
    basemap_df = load_basemap(basemap_path) if basemap_path is not None else None

    chart = build_map_chart(prepared.nodes, prepared.segments.to_frame(), basemap_df, config)
    saved = save_map(chart, output_path) if output_path is not None else None
    return TravelMapResult(prepared=prepared, chart=chart, output_path=saved)
