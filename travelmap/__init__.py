"""Travel network map: graph preparation and static map rendering."""

__version__ = "0.1.0"
