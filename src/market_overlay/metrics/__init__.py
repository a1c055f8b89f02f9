"""Market metrics — look-back lookups, derived snapshots, and the live tick buffer."""

from market_overlay.metrics.buffer import LiveSampleBuffer
from market_overlay.metrics.formulas import (
    derive_snapshot,
    high_low,
    nearest_sample,
    pct_change,
    trailing_window_values,
)

__all__ = [
    "LiveSampleBuffer",
    "derive_snapshot",
    "high_low",
    "nearest_sample",
    "pct_change",
    "trailing_window_values",
]
