"""Pure metric computation functions — no I/O, no rounding."""

from __future__ import annotations

import math
from bisect import bisect_left
from datetime import timedelta
from typing import Iterable, Sequence

import numpy as np

from market_overlay.models.market import (
    MarketSnapshot,
    TimeSeriesSample,
    WindowChange,
    window_label,
)

DEFAULT_HIGH_LOW_WINDOW = timedelta(hours=24)


def _finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def nearest_sample(
    series: Sequence[TimeSeriesSample],
    target_ms: int,
) -> TimeSeriesSample | None:
    """First sample at or after *target_ms*, else the last sample.

    Returns None only for an empty series. The series must be non-decreasing
    in ``timestamp_ms``.
    """
    if not series:
        return None
    idx = bisect_left(series, target_ms, key=lambda s: s.timestamp_ms)
    if idx >= len(series):
        return series[-1]
    return series[idx]


def pct_change(latest: float | None, base: float | None) -> float | None:
    """``(latest - base) / base * 100``, or None for non-finite input or a zero base."""
    if not _finite(latest) or not _finite(base) or base == 0:
        return None
    return (latest - base) / base * 100


def _last_value(series: Sequence[TimeSeriesSample]) -> float | None:
    if not series:
        return None
    value = series[-1].value
    return value if _finite(value) else None


def trailing_window_values(
    series: Sequence[TimeSeriesSample],
    window: timedelta,
) -> list[float]:
    """Values of the trailing slice that approximately covers *window*.

    The slice length is the window's share of the total series span, assuming
    evenly spaced samples: the last 1/7th of a 7-day series stands in for 24H.
    Never fewer than two samples (when available).
    """
    n = len(series)
    if n < 2:
        return [s.value for s in series]
    span_ms = series[-1].timestamp_ms - series[0].timestamp_ms
    if span_ms <= 0:
        size = n
    else:
        window_ms = window.total_seconds() * 1000
        size = max(2, math.floor(n * window_ms / span_ms))
    size = min(size, n)
    return [s.value for s in series[n - size:]]


def high_low(values: Iterable[float]) -> tuple[float | None, float | None]:
    """(max, min) over the finite values; (None, None) with fewer than two."""
    arr = np.asarray(list(values), dtype=np.float64)
    arr = arr[np.isfinite(arr)]
    if arr.size < 2:
        return None, None
    return float(np.max(arr)), float(np.min(arr))


def derive_snapshot(
    prices: Sequence[TimeSeriesSample],
    market_caps: Sequence[TimeSeriesSample],
    volumes: Sequence[TimeSeriesSample],
    now_ms: int,
    windows: Iterable[timedelta],
    high_low_window: timedelta = DEFAULT_HIGH_LOW_WINDOW,
) -> MarketSnapshot:
    """Derive point-in-time metrics and look-back deltas from raw series.

    Latest values are the last sample of each series. For every window the
    anchor is ``nearest_sample(prices, now_ms - window)``; its change is None
    unless the anchor is a finite positive price.

    An empty price series yields the all-null snapshot.
    """
    windows = list(windows)
    if not prices:
        return MarketSnapshot.empty(windows)

    latest = _last_value(prices)
    changes: list[WindowChange] = []
    for window in windows:
        target_ms = now_ms - int(window.total_seconds() * 1000)
        anchor = nearest_sample(prices, target_ms)
        value = None
        if anchor is not None and _finite(anchor.value) and anchor.value > 0:
            value = pct_change(latest, anchor.value)
        changes.append(WindowChange(window=window, label=window_label(window), value=value))

    high, low = high_low(trailing_window_values(prices, high_low_window))

    return MarketSnapshot(
        price_usd=latest,
        market_cap_usd=_last_value(market_caps),
        volume_24h_usd=_last_value(volumes),
        changes=changes,
        high_usd=high,
        low_usd=low,
        high_low_window=high_low_window,
    )
