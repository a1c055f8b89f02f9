"""Map a numeric sequence into sparkline screen coordinates.

x is evenly spaced by index, not by timestamp: polling is periodic, so equal
intervals are assumed. y is a linear min-max mapping with a range floor of 1,
which keeps a flat series from dividing by zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np


@dataclass(frozen=True)
class SparklineOptions:
    width: float = 140
    height: float = 32
    margin_x: float = 2
    margin_y: float = 2
    percent: bool = False
    as_area: bool = False
    show_zero_line: bool = False
    show_end_dot: bool = False


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class NormalizedSeries:
    points: list[Point] = field(default_factory=list)
    minimum: float | None = None
    maximum: float | None = None
    zero_y: float | None = None

    def __bool__(self) -> bool:
        return bool(self.points)


def percent_from_first(values: list[float]) -> list[float]:
    """Rescale to ``((v / v0) - 1) * 100``; raw values when v0 is zero or non-finite."""
    if not values:
        return []
    first = values[0]
    if not math.isfinite(first) or first == 0:
        return list(values)
    arr = np.asarray(values, dtype=np.float64)
    return ((arr / first - 1) * 100).tolist()


def _finite_values(values: Iterable[float | None]) -> list[float]:
    out: list[float] = []
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            continue
        if math.isfinite(v):
            out.append(float(v))
    return out


def normalize(
    values: Iterable[float | None],
    options: SparklineOptions | None = None,
) -> NormalizedSeries:
    """Normalize *values* into points within ``[0, width] x [0, height]``.

    Fewer than two finite values produce an empty series; callers render
    nothing in that case.
    """
    opts = options or SparklineOptions()
    series = _finite_values(values)
    if len(series) < 2:
        return NormalizedSeries()
    if opts.percent:
        series = percent_from_first(series)

    arr = np.asarray(series, dtype=np.float64)
    lo = float(arr.min())
    hi = float(arr.max())
    span = (hi - lo) or 1.0

    inner_height = opts.height - opts.margin_y * 2
    step_x = (opts.width - opts.margin_x * 2) / (len(series) - 1)
    bottom = opts.height - opts.margin_y

    xs = opts.margin_x + np.arange(len(series)) * step_x
    ys = bottom - (arr - lo) / span * inner_height
    points = [Point(float(x), float(y)) for x, y in zip(xs, ys)]

    zero_y = None
    if opts.show_zero_line:
        zero_y = bottom - (0 - lo) / span * inner_height
        zero_y = min(max(zero_y, opts.margin_y), bottom)

    return NormalizedSeries(points=points, minimum=lo, maximum=hi, zero_y=zero_y)
