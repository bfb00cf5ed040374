from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import pandas as pd

from travelmap import pipeline
from travelmap.render.config import load_render_config


@dataclass
class ValidationSummary:
    """Counts reported by the validate command."""
    locations: int
    connections: int
    categories: List[str] = field(default_factory=list)
    isolated: List[str] = field(default_factory=list)
    self_loops: int = 0
    repeated_pairs: int = 0


def render(
    locations_path: Path,
    connections_path: Path,
    basemap_path: Optional[Path],
    config_path: Optional[Path],
    output_path: Path,
) -> Path:
    """Render the travel map to ``output_path``.

    Raises:
        ValidationError: If the input tables are invalid
        ConfigError: If the render config or base map cannot be loaded
    """
    config = load_render_config(config_path)
    result = pipeline.run(
        locations_path=locations_path,
        connections_path=connections_path,
        basemap_path=basemap_path,
        config=config,
        output_path=output_path,
    )
    return result.output_path


def degree_table(locations_path: Path, connections_path: Path) -> pd.DataFrame:
    """Locations with their degree, most connected first."""
    locations, connections = pipeline.load_tables(locations_path, connections_path)
    nodes = pipeline.prepare(locations, connections).nodes
    return (
        nodes.rename(columns={"weight": "degree"})
        .sort_values(["degree", "id"], ascending=[False, True], kind="stable")
        .reset_index(drop=True)
    )


def export_segments(
    locations_path: Path,
    connections_path: Path,
    fmt: str,
    output_path: Optional[Path],
) -> Path:
    if fmt not in ("csv", "parquet"):
        raise ValueError(f"Unsupported format '{fmt}': use csv or parquet")
    if output_path is None:
        output_path = Path(f"segments.{fmt}")

    locations, connections = pipeline.load_tables(locations_path, connections_path)
    df = pipeline.prepare(locations, connections).segments.to_frame()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        df.to_parquet(output_path, index=False)
    else:
        df.to_csv(output_path, index=False)
    return output_path


def validate(locations_path: Path, connections_path: Path) -> ValidationSummary:
    locations, connections = pipeline.load_tables(locations_path, connections_path)
    prepared = pipeline.prepare(locations, connections)

    pairs = [frozenset((c.from_id, c.to_id)) for c in connections]
    return ValidationSummary(
        locations=len(locations),
        connections=len(connections),
        categories=connections.categories,
        isolated=[row.name for row in locations if prepared.degrees.get(row.id, 0) == 0],
        self_loops=sum(1 for c in connections if c.from_id == c.to_id),
        repeated_pairs=len(pairs) - len(set(pairs)),
    )


def print_degrees(df: pd.DataFrame) -> List[str]:
    """Format a degree table for CLI output.

    Args:
        df: Result of degree_table()

    Returns:
        List of formatted output lines
    """
    cols = ["id", "name", "longitude", "latitude", "degree"]
    widths = [4, 16, 11, 10, 6]
    header = " | ".join(col.ljust(w) for col, w in zip(cols, widths))
    lines = [header, "-" * len(header)]
    for _, row in df.iterrows():
        values = [
            str(row["id"]),
            str(row["name"]),
            f"{row['longitude']:.4f}",
            f"{row['latitude']:.4f}",
            str(row["degree"]),
        ]
        lines.append(" | ".join(v[:w].ljust(w) for v, w in zip(values, widths)))
    return lines


def print_validation_summary(summary: ValidationSummary) -> List[str]:
    lines = [
        f"Locations: {summary.locations}",
        f"Connections: {summary.connections}",
        f"Categories: {', '.join(summary.categories) if summary.categories else '-'}",
    ]
    if summary.self_loops:
        lines.append(f"  Self-loops: {summary.self_loops}")
    if summary.repeated_pairs:
        lines.append(f"  Repeated pairs (kept as separate edges): {summary.repeated_pairs}")
    if summary.isolated:
        lines.append(f"  Unconnected locations: {', '.join(summary.isolated)}")
    lines.append("OK")
    return lines
