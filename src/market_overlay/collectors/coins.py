"""Multi-coin snapshot poller — CoinGecko /coins/markets to the coin list."""

from __future__ import annotations

import time
from typing import Callable

import structlog

from market_overlay.collectors.base import Poller
from market_overlay.config.schema import CoinListConfig
from market_overlay.exchange.coingecko import CoinGeckoClient
from market_overlay.models import CoinQuote
from market_overlay.views.models import build_coin_list_view

log = structlog.get_logger("coins_poller")


class CoinListPoller(Poller):
    name = "coins"
    error_message = "Error loading coin list"

    def __init__(
        self,
        client: CoinGeckoClient,
        config: CoinListConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock=clock)
        self.client = client
        self.config = config
        self.view = build_coin_list_view(config.coins, [])

    async def fetch(self) -> list[CoinQuote]:
        ids = [coin.id for coin in self.config.coins]
        return await self.client.get_coin_markets(ids, vs_currency=self.config.vs_currency)

    async def apply(self, quotes: list[CoinQuote]) -> None:
        self.view = build_coin_list_view(self.config.coins, quotes)
        log.info("coins_applied", requested=len(self.config.coins), received=len(quotes))

    async def on_degraded(self, exc: BaseException) -> None:
        self.view = build_coin_list_view(self.config.coins, [])
