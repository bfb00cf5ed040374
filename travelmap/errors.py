"""Error types raised by the travel map pipeline."""
from __future__ import annotations


class TravelMapError(Exception):
    """Base class for every failure the pipeline reports."""


class ValidationError(TravelMapError, ValueError):
    """Input tables are malformed or reference unknown locations."""


class FatalAssertionError(TravelMapError, AssertionError):
    """A data-integrity postcondition failed after a transform."""


class ConfigError(TravelMapError, ValueError):
    """Render configuration or base map could not be loaded."""
