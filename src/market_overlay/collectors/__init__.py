"""Pollers — fetch, derive and render one overlay widget per period."""

from market_overlay.collectors.base import PollState, Poller
from market_overlay.collectors.coins import CoinListPoller
from market_overlay.collectors.metrics import MetricsPoller
from market_overlay.collectors.sales import SalesPoller

__all__ = ["CoinListPoller", "MetricsPoller", "PollState", "Poller", "SalesPoller"]
