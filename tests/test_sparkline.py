"""Tests for sparkline normalization and SVG rendering."""

from __future__ import annotations

import pytest

from market_overlay.sparkline import (
    SparklineOptions,
    normalize,
    percent_from_first,
    render_sparkline,
    trend_class,
)


class TestNormalize:
    def test_two_points_span_the_box(self):
        norm = normalize([0, 10])
        assert [(p.x, p.y) for p in norm.points] == [(2.0, 30.0), (138.0, 2.0)]
        assert norm.minimum == 0 and norm.maximum == 10

    def test_flat_series_uses_range_floor(self):
        norm = normalize([5, 5, 5])
        assert [p.y for p in norm.points] == [30.0, 30.0, 30.0]

    def test_points_stay_in_bounds(self):
        opts = SparklineOptions()
        norm = normalize([3.2, -7.5, 100.0, 42.0, 0.001], opts)
        for p in norm.points:
            assert 0 <= p.x <= opts.width
            assert 0 <= p.y <= opts.height

    def test_evenly_spaced_x(self):
        norm = normalize([1, 2, 3, 4, 5])
        xs = [p.x for p in norm.points]
        steps = {round(b - a, 6) for a, b in zip(xs, xs[1:])}
        assert steps == {34.0}

    def test_too_few_values(self):
        assert not normalize([])
        assert not normalize([1.0])
        assert not normalize([1.0, None, float("nan")])

    def test_skips_non_finite(self):
        norm = normalize([1.0, None, float("inf"), 3.0])
        assert len(norm.points) == 2

    def test_percent_mode_zero_line(self):
        opts = SparklineOptions(percent=True, show_zero_line=True)
        norm = normalize([100, 110, 90], opts)
        assert norm.minimum == pytest.approx(-10.0)
        assert norm.maximum == pytest.approx(10.0)
        assert norm.zero_y == pytest.approx(16.0)

    def test_zero_line_clamped(self):
        opts = SparklineOptions(show_zero_line=True)
        norm = normalize([10, 20], opts)
        assert norm.zero_y == 30.0


class TestPercentFromFirst:
    def test_rescales(self):
        assert percent_from_first([50.0, 75.0, 25.0]) == pytest.approx([0.0, 50.0, -50.0])

    def test_zero_first_falls_back_to_raw(self):
        assert percent_from_first([0.0, 5.0]) == [0.0, 5.0]

    def test_empty(self):
        assert percent_from_first([]) == []


class TestTrendClass:
    def test_classes(self):
        assert trend_class(1.2) == "positive"
        assert trend_class(-0.1) == "negative"
        assert trend_class(0) == "neutral"
        assert trend_class(None) == "neutral"
        assert trend_class(float("nan")) == "neutral"


class TestRenderSparkline:
    def test_line_path(self):
        svg = render_sparkline([0, 10], "positive")
        assert svg.startswith('<svg class="sparkline" viewBox="0 0 140 32"')
        assert 'class="sparkline-path positive"' in svg
        assert 'd="M2.00 30.00 L138.00 2.00"' in svg
        assert 'pathLength="100"' in svg
        assert "sparkline-area" not in svg
        assert svg.endswith("</svg>")

    def test_area_closes_to_baseline(self):
        svg = render_sparkline([0, 10], options=SparklineOptions(as_area=True))
        assert 'class="sparkline-area neutral"' in svg
        assert 'd="M 2.00 30.00 L 2.00 30.00 L 138.00 2.00 L 138.00 30.00 Z"' in svg

    def test_end_dot(self):
        svg = render_sparkline([0, 10], options=SparklineOptions(show_end_dot=True))
        assert '<circle class="sparkline-end-dot" cx="138.00" cy="2.00" r="1.8" />' in svg

    def test_zero_line(self):
        opts = SparklineOptions(percent=True, show_zero_line=True)
        svg = render_sparkline([100, 110, 90], options=opts)
        assert 'class="sparkline-zero-line"' in svg
        assert 'y1="16.00"' in svg

    def test_nothing_to_draw(self):
        assert render_sparkline([]) == ""
        assert render_sparkline([42.0]) == ""

    def test_deterministic(self):
        values = [1.0, 3.5, 2.25, 8.0]
        opts = SparklineOptions(as_area=True, show_end_dot=True)
        assert render_sparkline(values, "negative", opts) == render_sparkline(values, "negative", opts)
