"""Tests for market metric derivation and the live sample buffer."""

from __future__ import annotations

import math
from datetime import timedelta

import pytest

from conftest import HOUR_MS, T0, make_series
from market_overlay.metrics import (
    LiveSampleBuffer,
    derive_snapshot,
    high_low,
    nearest_sample,
    pct_change,
    trailing_window_values,
)
from market_overlay.models import MarketSnapshot
from market_overlay.sparkline import SparklineOptions, normalize

H1 = timedelta(hours=1)
H4 = timedelta(hours=4)
H24 = timedelta(hours=24)


class TestNearestSample:
    def test_empty(self):
        assert nearest_sample([], T0) is None

    def test_exact_match(self):
        series = make_series([1.0, 2.0, 3.0])
        assert nearest_sample(series, T0 + HOUR_MS).value == 2.0

    def test_first_at_or_after_target(self):
        series = make_series([1.0, 2.0, 3.0])
        assert nearest_sample(series, T0 + 1).value == 2.0

    def test_before_series_start(self):
        series = make_series([1.0, 2.0, 3.0])
        assert nearest_sample(series, T0 - 10 * HOUR_MS).value == 1.0

    def test_past_end_returns_last(self):
        series = make_series([1.0, 2.0, 3.0])
        assert nearest_sample(series, T0 + 100 * HOUR_MS).value == 3.0


class TestPctChange:
    def test_basic(self):
        assert pct_change(110.0, 100.0) == pytest.approx(10.0)

    def test_zero_base(self):
        assert pct_change(110.0, 0.0) is None

    def test_none_and_nan(self):
        assert pct_change(None, 100.0) is None
        assert pct_change(110.0, float("nan")) is None


class TestTrailingWindow:
    def test_one_seventh_of_week(self):
        series = make_series([float(i) for i in range(169)])
        values = trailing_window_values(series, H24)
        assert len(values) == 24
        assert values[-1] == 168.0

    def test_minimum_two(self):
        series = make_series([float(i) for i in range(169)])
        assert len(trailing_window_values(series, timedelta(minutes=1))) == 2

    def test_capped_at_length(self):
        series = make_series([1.0, 2.0, 3.0])
        assert trailing_window_values(series, timedelta(days=30)) == [1.0, 2.0, 3.0]

    def test_short_series(self):
        assert trailing_window_values(make_series([5.0]), H24) == [5.0]


class TestHighLow:
    def test_basic(self):
        assert high_low([3.0, 1.0, 2.0]) == (3.0, 1.0)

    def test_ignores_non_finite(self):
        assert high_low([3.0, float("nan"), 1.0, float("inf")]) == (3.0, 1.0)

    def test_needs_two(self):
        assert high_low([1.0]) == (None, None)
        assert high_low([]) == (None, None)


class TestDeriveSnapshot:
    def test_one_hour_change(self):
        prices = make_series([100.0, 110.0])
        snap = derive_snapshot(prices, [], [], T0 + HOUR_MS, [H1])
        assert snap.price_usd == 110.0
        assert snap.change_for(H1) == pytest.approx(10.0)
        assert snap.changes[0].label == "1H"

    def test_latest_values(self):
        prices = make_series([1.0, 2.0])
        caps = make_series([10.0, 20.0])
        vols = make_series([5.0, 7.0])
        snap = derive_snapshot(prices, caps, vols, T0 + HOUR_MS, [H1])
        assert snap.market_cap_usd == 20.0
        assert snap.volume_24h_usd == 7.0

    def test_zero_anchor_yields_none(self):
        prices = make_series([0.0, 110.0])
        snap = derive_snapshot(prices, [], [], T0 + HOUR_MS, [H1])
        assert snap.change_for(H1) is None
        assert snap.price_usd == 110.0

    def test_empty_prices(self):
        snap = derive_snapshot([], [], [], T0, [H1, H4, H24])
        assert snap.price_usd is None
        assert snap.market_cap_usd is None
        assert snap.volume_24h_usd is None
        assert snap.high_usd is None and snap.low_usd is None
        assert [c.value for c in snap.changes] == [None, None, None]
        assert [c.label for c in snap.changes] == ["1H", "4H", "24H"]

    def test_empty_snapshot_helper(self):
        assert MarketSnapshot.empty([H24]).changes[0].label == "24H"

    def test_week_series(self):
        values = [float(i) for i in range(169)]
        prices = make_series(values)
        now_ms = T0 + 168 * HOUR_MS
        snap = derive_snapshot(prices, [], [], now_ms, [H1, H4, H24])

        assert snap.price_usd == 168.0
        assert snap.change_for(H1) == pytest.approx((168 - 167) / 167 * 100)
        assert snap.change_for(H4) == pytest.approx((168 - 164) / 164 * 100)
        assert snap.change_for(H24) == pytest.approx((168 - 144) / 144 * 100)
        assert (snap.high_usd, snap.low_usd) == (168.0, 145.0)
        assert snap.high_low_window == H24

    def test_changes_are_finite_or_none(self):
        prices = make_series([float("nan"), 2.0, 3.0])
        snap = derive_snapshot(prices, [], [], T0 + 2 * HOUR_MS, [H1, timedelta(hours=2)])
        for change in snap.changes:
            assert change.value is None or math.isfinite(change.value)
        assert snap.change_for(timedelta(hours=2)) is None


class TestLiveSampleBuffer:
    def test_evicts_oldest(self):
        buf = LiveSampleBuffer(capacity=3)
        for v in (1.0, 2.0, 3.0, 4.0):
            buf.push(v)
        assert buf.snapshot() == (2.0, 3.0, 4.0)
        assert len(buf) == 3

    def test_ignores_invalid(self):
        buf = LiveSampleBuffer(capacity=3)
        assert buf.push(None) is False
        assert buf.push(float("nan")) is False
        assert buf.push(1.5) is True
        assert buf.snapshot() == (1.5,)

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            LiveSampleBuffer(capacity=0)

    def test_change_over_last_k(self):
        buf = LiveSampleBuffer(capacity=10)
        for v in (50.0, 100.0, 105.0, 110.0):
            buf.push(v)
        assert buf.change_pct_over_last_k(3) == pytest.approx(10.0)
        assert buf.change_pct_over_last_k(12) == pytest.approx(120.0)

    def test_change_needs_two_values(self):
        buf = LiveSampleBuffer()
        buf.push(1.0)
        assert buf.change_pct_over_last_k(12) is None
        buf.push(2.0)
        assert buf.change_pct_over_last_k(1) is None

    def test_clear(self):
        buf = LiveSampleBuffer()
        buf.push(1.0)
        buf.clear()
        assert len(buf) == 0


class TestPipelineDeterminism:
    def test_derive_and_normalize_twice_is_identical(self):
        values = [0.02 + 0.0003 * ((i * 7) % 11) - 0.0001 * i for i in range(169)]
        prices = tuple(make_series(values))
        caps = tuple(make_series([v * 1e9 for v in values]))
        vols = tuple(make_series([1e6 + i for i in range(169)]))
        now_ms = T0 + 168 * HOUR_MS
        opts = SparklineOptions(percent=True, show_zero_line=True)

        def run():
            snap = derive_snapshot(prices, caps, vols, now_ms, [H1, H4, H24])
            norm = normalize(trailing_window_values(prices, H24), opts)
            return snap, norm

        snap_a, norm_a = run()
        snap_b, norm_b = run()
        assert snap_a == snap_b
        assert [c.value for c in snap_a.changes] == [c.value for c in snap_b.changes]
        assert all(c.value is not None for c in snap_a.changes)
        assert norm_a == norm_b
        assert norm_a.points == norm_b.points
        assert norm_a.zero_y is not None
