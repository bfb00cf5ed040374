"""World base map polygons supplied as flat point records."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from travelmap.errors import ConfigError
from travelmap.logging_config import get_logger

logger = get_logger(__name__)

BASEMAP_COLUMNS = ["longitude", "latitude", "group", "order"]

BASEMAP_ALIASES = {
    "long": "longitude",
    "lon": "longitude",
    "lng": "longitude",
    "x": "longitude",
    "lat": "latitude",
    "y": "latitude",
}


def load_basemap(path: Union[str, Path]) -> pd.DataFrame:
    """Load polygon points from CSV.

    Expected columns: ``long``/``longitude``, ``lat``/``latitude``, ``group``
    and optionally ``order``. Without ``order``, file order is the ring order.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Base map not found: {path}")
    try:
        df = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ConfigError(f"Could not parse base map {path}: {exc}") from exc

    df = df.rename(columns=lambda c: BASEMAP_ALIASES.get(c.strip().lower(), c.strip().lower()))
    missing = [c for c in ("longitude", "latitude", "group") if c not in df.columns]
    if missing:
        raise ConfigError(f"Base map {path} is missing columns: {', '.join(missing)}")
    if "order" not in df.columns:
        df["order"] = range(len(df))

    df = df[BASEMAP_COLUMNS].dropna(subset=["longitude", "latitude"])
    logger.debug("Loaded base map: %d points in %d polygons", len(df), df["group"].nunique())
    return df


def basemap_features(df: pd.DataFrame) -> Dict[str, Any]:
    """GeoJSON FeatureCollection with one closed polygon per group."""
    features: List[Dict[str, Any]] = []
    for group, points in df.sort_values("order", kind="stable").groupby("group", sort=False):
        ring = [[float(lon), float(lat)] for lon, lat in zip(points["longitude"], points["latitude"])]
        if len(ring) < 3:
            continue
        if ring[0] != ring[-1]:
            ring.append(ring[0])
        features.append({
            "type": "Feature",
            "properties": {"group": str(group)},
            "geometry": {"type": "Polygon", "coordinates": [ring]},
        })
    return {"type": "FeatureCollection", "features": features}
