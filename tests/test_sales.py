"""Tests for the sales window, session high and animation tracking."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from conftest import NOW, make_sale
from market_overlay.sales import (
    SaleAnimationTracker,
    event_key,
    filter_window,
    max_by_price,
    normalized_price,
    parse_timestamp,
    session_high,
)

NOW_S = int(NOW.timestamp())


class TestParseTimestamp:
    def test_unix_seconds(self):
        assert parse_timestamp(NOW_S) == NOW
        assert parse_timestamp(float(NOW_S)) == NOW

    def test_numeric_string(self):
        assert parse_timestamp(str(NOW_S)) == NOW

    def test_iso_with_z(self):
        assert parse_timestamp("2026-01-01T00:00:00Z") == NOW

    def test_naive_iso_is_utc(self):
        assert parse_timestamp("2026-01-01T00:00:00") == NOW

    def test_iso_with_offset(self):
        parsed = parse_timestamp("2026-01-01T02:00:00+02:00")
        assert parsed == NOW

    def test_malformed(self):
        assert parse_timestamp("not-a-date") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp(True) is None
        assert parse_timestamp(float("nan")) is None


class TestFilterWindow:
    def test_keeps_recent_drops_old(self):
        recent = make_sale("recent", timestamp=NOW_S - 3600)
        old = make_sale("old", timestamp=NOW_S - 25 * 3600)
        kept = filter_window([recent, old], NOW, timedelta(hours=24))
        assert [e.id for e in kept] == ["recent"]

    def test_boundary_inclusive(self):
        edge = make_sale("edge", timestamp=NOW_S - 24 * 3600)
        assert filter_window([edge], NOW, timedelta(hours=24)) == [edge]

    def test_drops_unparseable(self):
        bad = make_sale("bad", timestamp="not-a-date")
        assert filter_window([bad], NOW, timedelta(hours=24)) == []


class TestNormalizedPrice:
    def test_scales_by_decimals(self):
        assert normalized_price(make_sale(quantity="2500000000000000000")) == Decimal("2.5")
        assert normalized_price(make_sale(quantity="1500000", decimals=6)) == Decimal("1.5")

    def test_invalid_quantities(self):
        assert normalized_price(make_sale(quantity=None)) is None
        assert normalized_price(make_sale(quantity="0")) is None
        assert normalized_price(make_sale(quantity="abc")) is None

    def test_rejects_digit_separators(self):
        assert normalized_price(make_sale(quantity="1_000")) is None
        assert normalized_price(make_sale(quantity="1_000_000_000_000_000_000")) is None


class TestMaxByPrice:
    def test_highest_wins(self):
        a = make_sale("a", quantity="1000000000000000000", decimals=18)
        b = make_sale("b", quantity="2000000000000000000", decimals=18)
        assert max_by_price([a, b]) is b

    def test_ties_keep_first(self):
        a = make_sale("a", quantity="1000000000000000000")
        b = make_sale("b", quantity="1000000000000000000")
        assert max_by_price([a, b]) is a

    def test_mixed_decimals_compare_normalized(self):
        a = make_sale("a", quantity="3000000", decimals=6)
        b = make_sale("b", quantity="2000000000000000000", decimals=18)
        assert max_by_price([a, b]) is a

    def test_skips_unpriced(self):
        a = make_sale("a", quantity=None)
        assert max_by_price([a]) is None
        assert max_by_price([]) is None


class TestSessionHigh:
    def test_ignores_sales_outside_window(self):
        old_big = make_sale("old", quantity="9000000000000000000", timestamp=NOW_S - 48 * 3600)
        recent = make_sale("recent", quantity="1000000000000000000")
        assert session_high([old_big, recent], NOW) is recent

    def test_none_when_window_empty(self):
        old = make_sale("old", timestamp=NOW_S - 48 * 3600)
        assert session_high([old], NOW) is None


class TestEventKey:
    def test_joins_parts(self):
        ev = make_sale("abc", contract="0x1", identifier="42", timestamp=1700000000)
        assert event_key(ev) == "abc|0x1|42|1700000000"

    def test_drops_empty_parts(self):
        ev = make_sale("", contract=None, identifier="42", timestamp=1700000000)
        assert event_key(ev) == "42|1700000000"


class TestSaleAnimationTracker:
    def test_first_observation_sets_end(self):
        tracker = SaleAnimationTracker(duration_ms=5000)
        assert tracker.observe("k", 1000) == 6000
        assert "k" in tracker

    def test_end_time_never_updated(self):
        tracker = SaleAnimationTracker(duration_ms=5000)
        tracker.observe("k", 1000)
        assert tracker.observe("k", 9000) == 6000
        assert len(tracker) == 1

    def test_remaining(self):
        tracker = SaleAnimationTracker(duration_ms=5000)
        tracker.observe("k", 1000)
        assert tracker.remaining_ms("k", 3000) == 4000
        assert tracker.is_animating("k", 3000)
        assert tracker.remaining_ms("k", 7000) == 0
        assert not tracker.is_animating("k", 7000)
        assert tracker.remaining_ms("unknown", 0) == 0
