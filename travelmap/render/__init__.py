"""Map rendering: configuration and Altair chart composition."""
from travelmap.render.chart import build_map_chart, curve_points, save_map
from travelmap.render.config import RenderConfig, load_render_config

__all__ = [
    "RenderConfig",
    "build_map_chart",
    "curve_points",
    "load_render_config",
    "save_map",
]
