"""Segment join: one drawable line per connection."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

import pandas as pd

from travelmap.errors import FatalAssertionError
from travelmap.logging_config import get_logger
from travelmap.schemas import Segment
from travelmap.tables import ConnectionTable, LocationTable, check_references

logger = get_logger(__name__)

SEGMENT_COLUMNS = ["from_id", "to_id", "weight", "category", "x", "y", "xend", "yend"]


@dataclass(frozen=True)
class SegmentTable:
    """Denormalized connections carrying both endpoint coordinates."""

    rows: Tuple[Segment, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.rows)

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame([row.model_dump() for row in self.rows], columns=SEGMENT_COLUMNS)
        categories = sorted({row.category for row in self.rows})
        df["category"] = pd.Categorical(df["category"], categories=categories)
        return df


def join_frames(locations_df: pd.DataFrame, connections_df: pd.DataFrame) -> pd.DataFrame:
    """Attach from/to coordinates to each connection row.

    Two inner joins on location id: the first supplies ``x``/``y``, the second
    ``xend``/``yend``. Connection row order is preserved.

    Raises:
        FatalAssertionError: If the join dropped or duplicated rows
    """
    coords = locations_df[["id", "longitude", "latitude"]]
    segments = (
        connections_df.reset_index(drop=True)
        .assign(_row=range(len(connections_df)))
        .merge(coords, how="inner", left_on="from_id", right_on="id", sort=False)
        .rename(columns={"longitude": "x", "latitude": "y"})
        .drop(columns="id")
        .merge(coords, how="inner", left_on="to_id", right_on="id", sort=False)
        .rename(columns={"longitude": "xend", "latitude": "yend"})
        .drop(columns="id")
        .sort_values("_row", kind="stable")
        .reset_index(drop=True)
    )

    if len(segments) != len(connections_df):
        raise FatalAssertionError(
            f"Segment join produced {len(segments)} rows for {len(connections_df)} connections; "
            "check for duplicate location ids"
        )
    return segments[SEGMENT_COLUMNS]


def join_segments(locations: LocationTable, connections: ConnectionTable) -> SegmentTable:
    """Build the segment table for a validated pair of tables.

    Raises:
        ValidationError: If a connection references an unknown location
        FatalAssertionError: If the row count does not match the connections
    """
    check_references(locations, connections)

    df = join_frames(locations.to_frame(), connections.to_frame())
    rows = tuple(
        Segment(**{k: (v.item() if hasattr(v, "item") else v) for k, v in record.items()})
        for record in df.astype({"category": str}).to_dict(orient="records")
    )
    logger.debug("Joined %d segments", len(rows))
    return SegmentTable(rows=rows)
