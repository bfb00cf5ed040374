"""Static travel map built as a layered Altair chart."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

import altair as alt
import numpy as np
import pandas as pd

from travelmap.logging_config import get_logger
from travelmap.render.config import Bounds, RenderConfig
from travelmap.services.basemap import basemap_features

logger = get_logger(__name__)

IMAGE_FORMATS = {".png", ".svg", ".pdf", ".html", ".json"}

CURVE_COLUMNS = ["segment", "step", "longitude", "latitude", "category", "weight"]


def curve_points(segments_df: pd.DataFrame, curvature: float, samples: int) -> pd.DataFrame:
    """Sample each segment as a quadratic curve.

    Positive curvature bends to the right of the from->to direction, negative
    to the left, zero gives straight lines. Self-loops collapse to a point.
    """
    t = np.linspace(0.0, 1.0, samples)
    frames: List[pd.DataFrame] = []
    for segment_no, seg in enumerate(segments_df.itertuples(index=False)):
        start = np.array([seg.x, seg.y], dtype=float)
        end = np.array([seg.xend, seg.yend], dtype=float)
        delta = end - start
        control = (start + end) / 2 + curvature * np.array([delta[1], -delta[0]])
        points = (
            np.outer((1 - t) ** 2, start)
            + np.outer(2 * (1 - t) * t, control)
            + np.outer(t ** 2, end)
        )
        frames.append(pd.DataFrame({
            "segment": segment_no,
            "step": np.arange(samples),
            "longitude": points[:, 0],
            "latitude": points[:, 1],
            "category": str(seg.category),
            "weight": float(seg.weight),
        }))
    if not frames:
        return pd.DataFrame(columns=CURVE_COLUMNS)
    return pd.concat(frames, ignore_index=True)[CURVE_COLUMNS]


def map_projection(bounds: Bounds) -> alt.Projection:
    """Planar lon/lat projection fitted to the bounds, equal aspect."""
    (x0, x1), (y0, y1) = bounds.xlim, bounds.ylim
    frame = {
        "type": "Feature",
        "properties": {},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]],
        },
    }
    return alt.Projection(type="identity", reflectY=True, fit=frame)


def _categories(segments_df: pd.DataFrame) -> List[str]:
    column = segments_df["category"]
    if isinstance(column.dtype, pd.CategoricalDtype):
        return [str(c) for c in column.cat.categories]
    return sorted({str(c) for c in column})


def _basemap_layer(
    basemap_df: Optional[pd.DataFrame],
    config: RenderConfig,
    projection: alt.Projection,
) -> alt.Chart:
    style = config.basemap
    if basemap_df is not None:
        data = alt.Data(
            values=basemap_features(basemap_df),
            format=alt.DataFormat(property="features", type="json"),
        )
    else:
        data = alt.topo_feature(style.url, style.feature)
    return alt.Chart(data).mark_geoshape(
        fill=style.fill,
        stroke=style.stroke,
        strokeWidth=style.stroke_width,
        clip=True,
    ).properties(projection=projection)


def _edge_layer(segments_df: pd.DataFrame, config: RenderConfig, projection: alt.Projection) -> alt.Chart:
    style = config.edges
    categories = _categories(segments_df)
    scale = alt.Scale(domain=categories, range=style.palette) if style.palette else alt.Scale(domain=categories)
    legend = None if config.theme.legend_position == "none" else alt.Legend(title=None)

    curves = curve_points(segments_df, style.curvature, style.samples)
    return alt.Chart(curves).mark_line(
        opacity=style.opacity,
        strokeCap="round",
        clip=True,
    ).encode(
        longitude="longitude:Q",
        latitude="latitude:Q",
        detail="segment:N",
        order="step:Q",
        color=alt.Color("category:N", scale=scale, legend=legend),
        strokeWidth=alt.StrokeWidth(
            "weight:Q",
            scale=alt.Scale(range=list(style.width_range)),
            legend=None,
        ),
    ).properties(projection=projection)


def _node_layer(locations_df: pd.DataFrame, config: RenderConfig, projection: alt.Projection) -> alt.Chart:
    style = config.nodes
    return alt.Chart(locations_df).mark_point(
        shape="circle",
        filled=True,
        fill=style.fill,
        stroke=style.stroke,
        strokeWidth=style.stroke_width,
        opacity=1,
        clip=True,
    ).encode(
        longitude="longitude:Q",
        latitude="latitude:Q",
        size=alt.Size("weight:Q", scale=alt.Scale(range=list(style.size_range)), legend=None),
    ).properties(projection=projection)


def _label_layers(locations_df: pd.DataFrame, config: RenderConfig, projection: alt.Projection) -> List[alt.Chart]:
    style = config.labels
    labels = locations_df.assign(
        label_longitude=locations_df["longitude"] + style.nudge_x,
        label_latitude=locations_df["latitude"] + style.nudge_y,
    )
    base = alt.Chart(labels)
    leaders = base.mark_rule(color=style.segment_color, strokeWidth=0.5, clip=True).encode(
        longitude="longitude:Q",
        latitude="latitude:Q",
        longitude2="label_longitude",
        latitude2="label_latitude",
    ).properties(projection=projection)
    text = base.mark_text(
        color=style.color,
        fontSize=style.font_size,
        fontWeight=style.font_weight,
        baseline="bottom",
        clip=True,
    ).encode(
        longitude="label_longitude:Q",
        latitude="label_latitude:Q",
        text="name:N",
    ).properties(projection=projection)
    return [leaders, text]


def build_map_chart(
    locations_df: pd.DataFrame,
    segments_df: pd.DataFrame,
    basemap_df: Optional[pd.DataFrame],
    config: RenderConfig,
) -> alt.LayerChart:
    """Compose the travel map.

    Args:
        locations_df: Locations with a ``weight`` (degree) column
        segments_df: One row per connection with x/y/xend/yend
        basemap_df: Polygon points (longitude, latitude, group, order), or
            None to use the TopoJSON world map from the config
        config: Visual channel settings

    Returns:
        Layered chart: land, edges, nodes, label leaders, labels
    """
    projection = map_projection(config.bounds)
    layers = [
        _basemap_layer(basemap_df, config, projection),
        _edge_layer(segments_df, config, projection),
        _node_layer(locations_df, config, projection),
        *_label_layers(locations_df, config, projection),
    ]

    top, right, bottom, left = config.theme.margin
    chart = alt.layer(*layers).properties(
        width=config.theme.width,
        height=config.height,
        padding={"top": top, "right": right, "bottom": bottom, "left": left},
        usermeta={"render_config": config.model_dump(mode="json")},
    ).configure_view(
        fill=config.theme.background,
        strokeWidth=0,
    )
    if config.theme.legend_position != "none":
        chart = chart.configure_legend(orient=config.theme.legend_position)
    return chart


def save_map(chart: alt.LayerChart, path: Union[str, Path]) -> Path:
    """Write the chart; the file suffix picks the format.

    PNG, SVG and PDF output go through vl-convert.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in IMAGE_FORMATS:
        raise ValueError(
            f"Unsupported output format '{suffix}'; use one of {', '.join(sorted(IMAGE_FORMATS))}"
        )
    path.parent.mkdir(parents=True, exist_ok=True)
    chart.save(str(path))
    logger.info("Wrote map to %s", path)
    return path
