"""YAML-driven render configuration - every visual channel in one value."""
from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional, Tuple, Union

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from travelmap.errors import ConfigError

WORLD_110M_URL = "https://cdn.jsdelivr.net/npm/vega-datasets@v1.29.0/data/world-110m.json"


class _Style(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class NodeStyle(_Style):
    """Location markers; area scales with degree."""

    fill: str = "white"
    stroke: str = "black"
    stroke_width: float = 0.5
    size_range: Tuple[float, float] = (15.0, 300.0)


class EdgeStyle(_Style):
    """Connection arcs; width scales with weight, color follows category."""

    curvature: float = 0.33
    opacity: float = Field(0.8, ge=0, le=1)
    width_range: Tuple[float, float] = (0.5, 3.0)
    samples: int = Field(24, ge=2)
    palette: Optional[List[str]] = None


class LabelStyle(_Style):
    """Location labels.

    ``nudge_x``/``nudge_y`` are in data units (degrees). The repulsion
    settings are carried with the chart metadata for renderers that
    support label repulsion.
    """

    font_size: float = 12
    color: str = "white"
    font_weight: str = "bold"
    nudge_x: float = 2
    nudge_y: float = 4
    box_padding: float = 0.5
    force: float = 2
    max_overlaps: Optional[int] = None
    direction: Literal["both", "x", "y"] = "y"
    segment_curvature: float = -0.1
    segment_ncp: int = 3
    segment_angle: float = Field(20, ge=0, le=180)
    segment_color: str = "white"
    segment_inflect: bool = False
    segment_square: bool = True


class BasemapStyle(_Style):
    fill: str = "#CECECE"
    stroke: str = "#515151"
    stroke_width: float = 0.15
    url: str = WORLD_110M_URL
    feature: str = "countries"


class Bounds(_Style):
    """Visible longitude/latitude window."""

    xlim: Tuple[float, float] = (-150, 180)
    ylim: Tuple[float, float] = (-55, 80)

    @model_validator(mode="after")
    def check_order(self) -> "Bounds":
        if self.xlim[0] >= self.xlim[1] or self.ylim[0] >= self.ylim[1]:
            raise ValueError("bounds must be given as (min, max)")
        return self


class ThemeStyle(_Style):
    background: str = "#596673"
    legend_position: Literal["bottom", "top", "left", "right", "none"] = "bottom"
    width: int = Field(1000, gt=0)
    # top, right, bottom, left (px)
    margin: Tuple[int, int, int, int] = (0, 0, 20, 0)


class RenderConfig(_Style):
    nodes: NodeStyle = NodeStyle()
    edges: EdgeStyle = EdgeStyle()
    labels: LabelStyle = LabelStyle()
    basemap: BasemapStyle = BasemapStyle()
    bounds: Bounds = Bounds()
    theme: ThemeStyle = ThemeStyle()

    @property
    def height(self) -> int:
        """Plot height keeping one degree of longitude equal to one of latitude."""
        x_span = self.bounds.xlim[1] - self.bounds.xlim[0]
        y_span = self.bounds.ylim[1] - self.bounds.ylim[0]
        return max(1, round(self.theme.width * y_span / x_span))


def load_render_config(path: Optional[Union[str, Path]] = None) -> RenderConfig:
    """Load a RenderConfig from YAML; missing keys keep their defaults.

    Config format:
        edges:
          curvature: 0.33
          width_range: [0.5, 3.0]
        labels:
          nudge_y: 4
        bounds:
          xlim: [-150, 180]
          ylim: [-55, 80]
    """
    if path is None:
        return RenderConfig()

    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (yaml.YAMLError, OSError) as exc:
        raise ConfigError(f"Could not read render config {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Render config {path} must be a mapping")

    try:
        return RenderConfig.model_validate(raw)
    except pydantic.ValidationError as exc:
        raise ConfigError(f"Invalid render config {path}: {exc}") from exc
