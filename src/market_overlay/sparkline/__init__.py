"""SVG sparklines — normalization to screen space and path rendering."""

from market_overlay.sparkline.normalize import (
    NormalizedSeries,
    Point,
    SparklineOptions,
    normalize,
    percent_from_first,
)
from market_overlay.sparkline.render import render_sparkline, trend_class

__all__ = [
    "NormalizedSeries",
    "Point",
    "SparklineOptions",
    "normalize",
    "percent_from_first",
    "render_sparkline",
    "trend_class",
]
