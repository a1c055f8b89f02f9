"""Render normalized sparkline points as an inline SVG string."""

from __future__ import annotations

from typing import Iterable, Literal

from market_overlay.sparkline.normalize import SparklineOptions, normalize

Trend = Literal["positive", "negative", "neutral"]


def trend_class(change_pct: float | None) -> Trend:
    """Color class for a sparkline, from the associated change value."""
    if change_pct is None or change_pct != change_pct:
        return "neutral"
    if change_pct > 0:
        return "positive"
    if change_pct < 0:
        return "negative"
    return "neutral"


def _fmt(n: float) -> str:
    return f"{n:.2f}"


def render_sparkline(
    values: Iterable[float | None],
    trend: Trend = "neutral",
    options: SparklineOptions | None = None,
) -> str:
    """Build the ``<svg>`` for *values*; empty string when there is nothing to draw.

    Output is a pure function of the input and options.
    """
    opts = options or SparklineOptions()
    norm = normalize(values, opts)
    if not norm:
        return ""

    points = norm.points
    first, last = points[0], points[-1]
    line_d = " ".join(
        f"{'M' if i == 0 else 'L'}{_fmt(p.x)} {_fmt(p.y)}" for i, p in enumerate(points)
    )

    parts = [
        f'<svg class="sparkline" viewBox="0 0 {opts.width:g} {opts.height:g}" '
        f'preserveAspectRatio="none">'
    ]

    if opts.as_area:
        bottom = _fmt(opts.height - opts.margin_y)
        area_d = " ".join(
            [f"M {_fmt(first.x)} {bottom}"]
            + [f"L {_fmt(p.x)} {_fmt(p.y)}" for p in points]
            + [f"L {_fmt(last.x)} {bottom} Z"]
        )
        parts.append(f'<path class="sparkline-area {trend}" d="{area_d}" />')

    parts.append(f'<path class="sparkline-path {trend}" d="{line_d}" pathLength="100" />')

    if norm.zero_y is not None:
        parts.append(
            f'<line class="sparkline-zero-line" x1="{_fmt(opts.margin_x)}" '
            f'y1="{_fmt(norm.zero_y)}" x2="{_fmt(opts.width - opts.margin_x)}" '
            f'y2="{_fmt(norm.zero_y)}" />'
        )

    if opts.show_end_dot:
        parts.append(
            f'<circle class="sparkline-end-dot" cx="{_fmt(last.x)}" '
            f'cy="{_fmt(last.y)}" r="1.8" />'
        )

    parts.append("</svg>")
    return "".join(parts)
