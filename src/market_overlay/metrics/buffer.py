"""Bounded FIFO of locally observed prices.

The provider's hourly resolution is too coarse for a "last hour" delta when
polling every few minutes, so each successful poll appends its price here.
The buffer starts empty on every process start: short-window deltas stay
None until enough ticks have accumulated.
"""

from __future__ import annotations

import math
from collections import deque

from market_overlay.metrics.formulas import pct_change


class LiveSampleBuffer:
    """Append-only ring buffer; the oldest value is evicted when full."""

    def __init__(self, capacity: int = 24) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._values: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._values.maxlen

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: float | None) -> bool:
        """Append *value*; None and non-finite values are ignored."""
        if value is None or not math.isfinite(value):
            return False
        self._values.append(float(value))
        return True

    def snapshot(self) -> tuple[float, ...]:
        """Buffer contents, oldest first."""
        return tuple(self._values)

    def change_pct_over_last_k(self, k: int) -> float | None:
        """Percent change from the first to the last of the newest *k* values."""
        if k < 2 or len(self._values) < 2:
            return None
        recent = list(self._values)[-k:]
        return pct_change(recent[-1], recent[0])

    def clear(self) -> None:
        self._values.clear()
