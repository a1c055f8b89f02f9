"""Token metrics poller — CoinGecko market chart to price ticker and sparklines."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Callable

import structlog

from market_overlay.collectors.base import Poller
from market_overlay.config.schema import MetricsConfig, parse_duration
from market_overlay.exchange.coingecko import CoinGeckoClient
from market_overlay.metrics import LiveSampleBuffer, derive_snapshot, trailing_window_values
from market_overlay.models import MarketSeries, MarketSnapshot
from market_overlay.models.market import window_label
from market_overlay.views.models import MetricsView, build_metrics_view

log = structlog.get_logger("metrics_poller")


class MetricsPoller(Poller):
    name = "metrics"
    error_message = "Error loading price metrics"

    def __init__(
        self,
        client: CoinGeckoClient,
        buffer: LiveSampleBuffer,
        config: MetricsConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock=clock)
        self.client = client
        self.buffer = buffer
        self.config = config
        self.windows = [parse_duration(w) for w in config.windows]
        self.high_low_window = parse_duration(config.high_low_window)
        # The live delta spans live_delta_points ticks of poll_interval_s each.
        self.live_delta_label = window_label_for_points(config.live_delta_points, config.poll_interval_s)
        self._last_price_text: str | None = None
        self.snapshot = MarketSnapshot.empty(self.windows)
        self.view = self._build_view(self.snapshot, long_values=[], record=False)

    async def fetch(self) -> MarketSeries:
        return await self.client.get_market_chart(
            self.config.asset_id,
            vs_currency=self.config.vs_currency,
            days=self.config.lookback_days,
            interval=self.config.interval,
        )

    async def apply(self, series: MarketSeries) -> None:
        now_ms = int(self.clock() * 1000)
        snapshot = derive_snapshot(
            series.prices,
            series.market_caps,
            series.total_volumes,
            now_ms,
            self.windows,
            high_low_window=self.high_low_window,
        )
        self.buffer.push(snapshot.price_usd)
        self.snapshot = snapshot
        self.view = self._build_view(
            snapshot,
            long_values=trailing_window_values(series.prices, self.high_low_window),
        )
        log.info(
            "metrics_applied",
            asset=self.config.asset_id,
            price=snapshot.price_usd,
            samples=len(series.prices),
            live_samples=len(self.buffer),
        )

    async def on_degraded(self, exc: BaseException) -> None:
        self.snapshot = MarketSnapshot.empty(self.windows)
        self.view = self._build_view(self.snapshot, long_values=[])

    def _build_view(
        self,
        snapshot: MarketSnapshot,
        long_values: list[float],
        record: bool = True,
    ) -> MetricsView:
        view = build_metrics_view(
            snapshot,
            symbol=self.config.symbol,
            badge_window=self.high_low_window,
            live_values=self.buffer.snapshot(),
            live_delta_pct=self.buffer.change_pct_over_last_k(self.config.live_delta_points),
            live_delta_label=self.live_delta_label,
            long_values=long_values,
            previous_price_text=self._last_price_text,
        )
        if record:
            self._last_price_text = view.price_text
        return view


def window_label_for_points(points: int, poll_interval_s: int) -> str:
    """Label for the span covered by *points* live ticks, e.g. 12 x 5m -> 1H."""
    return window_label(timedelta(seconds=points * poll_interval_s))
