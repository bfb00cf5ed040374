"""Small tables shared by the test modules."""
from __future__ import annotations

from typing import Tuple

from travelmap.schemas import Connection, Location
from travelmap.tables import ConnectionTable, LocationTable


def make_locations(*rows: Tuple[int, float, float, str]) -> LocationTable:
    return LocationTable(rows=tuple(
        Location(id=id_, longitude=lon, latitude=lat, name=name) for id_, lon, lat, name in rows
    ))


def make_connections(*rows: Tuple[int, int, float, str]) -> ConnectionTable:
    return ConnectionTable(rows=tuple(
        Connection(from_id=a, to_id=b, weight=w, category=c) for a, b, w, c in rows
    ))


def two_locations() -> LocationTable:
    return make_locations((1, 0.0, 0.0, "A"), (2, 10.0, 10.0, "B"))


def count_endpoints(connections: ConnectionTable, location_id: int) -> int:
    """Reference degree: edge ends at location_id, self-loops counted twice."""
    return sum(
        (c.from_id == location_id) + (c.to_id == location_id) for c in connections
    )
