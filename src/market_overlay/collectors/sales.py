"""Sales feed poller — OpenSea sale events to the feed and high cards."""

from __future__ import annotations

import time
from datetime import datetime, timezone, tzinfo
from typing import Callable

import structlog

from market_overlay.collectors.base import Poller
from market_overlay.config.schema import SalesConfig, parse_duration
from market_overlay.exchange.opensea import OpenSeaClient
from market_overlay.models import SaleEvent
from market_overlay.sales import RarityResolver, SaleAnimationTracker, event_key, session_high
from market_overlay.views.models import (
    SalesView,
    build_all_time_high_card,
    build_sale_item,
    build_session_high_card,
)

log = structlog.get_logger("sales_poller")


class SalesPoller(Poller):
    name = "sales"
    error_message = "Error loading sales feed"

    def __init__(
        self,
        client: OpenSeaClient,
        resolver: RarityResolver,
        tracker: SaleAnimationTracker,
        config: SalesConfig,
        tz: tzinfo | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock=clock)
        self.client = client
        self.resolver = resolver
        self.tracker = tracker
        self.config = config
        self.tz = tz
        self.session_window = parse_duration(config.session_window)
        self.session_label = f"SESSION HIGH {config.session_window.upper()}"
        self.events: list[SaleEvent] = []
        self.view = self._empty_view()

    def _empty_view(self) -> SalesView:
        return SalesView(
            session_high=build_session_high_card(None, label=self.session_label),
            all_time_high=build_all_time_high_card(self.config.all_time_high),
        )

    async def fetch(self) -> list[SaleEvent]:
        return await self.client.get_sale_events(self.config.collection, self.config.limit)

    async def apply(self, events: list[SaleEvent]) -> None:
        now_s = self.clock()
        now_ms = int(now_s * 1000)
        now = datetime.fromtimestamp(now_s, tz=timezone.utc)

        high = session_high(events, now, self.session_window)

        items = []
        for event in events[: self.config.max_items]:
            key = event_key(event)
            self.tracker.observe(key, now_ms)
            rarity = await self.resolver.resolve(event.nft)
            items.append(build_sale_item(
                event,
                key,
                rarity,
                animation_remaining_ms=self.tracker.remaining_ms(key, now_ms),
                tz=self.tz,
            ))

        self.events = events
        self.view = SalesView(
            items=items,
            session_high=build_session_high_card(high, label=self.session_label),
            all_time_high=build_all_time_high_card(self.config.all_time_high),
        )
        log.info(
            "sales_applied",
            collection=self.config.collection,
            events=len(events),
            shown=len(items),
            session_high=high.id if high else None,
        )

    async def on_degraded(self, exc: BaseException) -> None:
        self.events = []
        self.view = self._empty_view()
