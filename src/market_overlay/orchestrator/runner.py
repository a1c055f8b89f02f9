"""Overlay runtime — one periodic schedule per poller on the running event loop."""

from __future__ import annotations

import asyncio
import time
from datetime import timezone, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo

import httpx
import structlog

from market_overlay.collectors import CoinListPoller, MetricsPoller, Poller, SalesPoller
from market_overlay.config.schema import AppConfig
from market_overlay.exchange import CoinGeckoClient, OpenSeaClient
from market_overlay.metrics import LiveSampleBuffer
from market_overlay.sales import RarityCache, RarityResolver, SaleAnimationTracker

log = structlog.get_logger("orchestrator")


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(name)


async def run_periodic(poller: Poller, interval_s: float, ticks: set[asyncio.Task]) -> None:
    """Fire ``poller.tick()`` every *interval_s* seconds without awaiting it.

    A slow tick keeps running while the next one fires; the poller's in-flight
    guard turns that overlap into a skip.
    """
    while True:
        task = asyncio.create_task(poller.tick())
        ticks.add(task)
        task.add_done_callback(ticks.discard)
        await asyncio.sleep(interval_s)


class OverlayRuntime:
    """Explicitly owned overlay state: buffer, caches, tracker, clients and pollers."""

    def __init__(
        self,
        config: AppConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.coingecko = CoinGeckoClient(
            base_url=config.coingecko.base_url,
            api_key=config.coingecko.api_key,
            timeout_s=config.coingecko.timeout_s,
            transport=transport,
        )
        self.opensea = OpenSeaClient(
            base_url=config.opensea.base_url,
            api_key=config.opensea.api_key,
            timeout_s=config.opensea.timeout_s,
            transport=transport,
        )
        self.metadata_http = httpx.AsyncClient(
            timeout=config.opensea.timeout_s,
            transport=transport,
            follow_redirects=True,
        )

        self.buffer = LiveSampleBuffer(config.metrics.live_buffer_capacity)
        self.rarity_cache = RarityCache()
        self.resolver = RarityResolver(self.metadata_http, self.rarity_cache)
        self.tracker = SaleAnimationTracker(config.sales.animation_ms)
        self.tz = resolve_timezone(config.display.timezone)

        self.metrics = MetricsPoller(self.coingecko, self.buffer, config.metrics, clock=clock)
        self.sales = SalesPoller(
            self.opensea, self.resolver, self.tracker, config.sales, tz=self.tz, clock=clock,
        )
        self.coins = CoinListPoller(self.coingecko, config.coins, clock=clock)

        self._schedules: list[asyncio.Task] = []
        self._ticks: set[asyncio.Task] = set()

    def schedule(self) -> list[tuple[Poller, int]]:
        plan: list[tuple[Poller, int]] = [
            (self.metrics, self.config.metrics.poll_interval_s),
            (self.sales, self.config.sales.poll_interval_s),
        ]
        if self.config.coins.enabled and self.config.coins.coins:
            plan.append((self.coins, self.config.coins.poll_interval_s))
        return plan

    @property
    def running(self) -> bool:
        return bool(self._schedules)

    async def start(self) -> None:
        if self._schedules:
            return
        if not self.config.opensea.api_key:
            log.warning("opensea_api_key_missing", detail="sales feed will stay degraded")
        for poller, interval_s in self.schedule():
            self._schedules.append(
                asyncio.create_task(run_periodic(poller, interval_s, self._ticks)),
            )
        log.info(
            "overlay_runtime_started",
            pollers={p.name: interval for p, interval in self.schedule()},
        )

    async def stop(self) -> None:
        for poller, _ in self.schedule():
            poller.invalidate()
        pending = [*self._schedules, *self._ticks]
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._schedules.clear()
        self._ticks.clear()
        await self.coingecko.close()
        await self.opensea.close()
        await self.metadata_http.aclose()
        log.info("overlay_runtime_stopped")
