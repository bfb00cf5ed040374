"""Data preparation services: graph, segments and base map."""
