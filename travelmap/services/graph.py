"""Travel graph construction and per-location degree."""
from __future__ import annotations

from typing import Dict

import networkx as nx
import pandas as pd

from travelmap.logging_config import get_logger
from travelmap.tables import ConnectionTable, LocationTable, check_references

logger = get_logger(__name__)


def build_travel_graph(
    locations: LocationTable,
    connections: ConnectionTable,
) -> nx.MultiGraph:
    """Build the undirected travel multigraph.

    Every location becomes a vertex, connected or not. Every connection row
    becomes exactly one edge: reciprocal pairs, repeated pairs and self-loops
    are all kept.

    Args:
        locations: Vertex set, keyed by location id
        connections: Edge list

    Returns:
        MultiGraph whose edge keys are the 0-based connection row numbers

    Raises:
        ValidationError: If a connection references an unknown location
    """
    check_references(locations, connections)

    graph = nx.MultiGraph()
    for location in locations:
        graph.add_node(
            location.id,
            name=location.name,
            longitude=location.longitude,
            latitude=location.latitude,
        )
    for row_no, connection in enumerate(connections):
        graph.add_edge(
            connection.from_id,
            connection.to_id,
            key=row_no,
            weight=connection.weight,
            category=connection.category,
        )

    logger.debug(
        "Built travel graph: %d nodes, %d edges",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph


def node_degrees(graph: nx.MultiGraph) -> Dict[int, int]:
    """Edge-end count per vertex; a self-loop adds 2, parallel edges add 1 each."""
    return {node: int(degree) for node, degree in graph.degree()}


def annotate_locations(locations: LocationTable, degrees: Dict[int, int]) -> pd.DataFrame:
    """Location frame with a ``weight`` column holding each node's degree."""
    df = locations.to_frame()
    df["weight"] = df["id"].map(lambda location_id: degrees.get(location_id, 0)).astype(int)
    return df
