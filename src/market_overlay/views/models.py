"""View models consumed by the HTML fragments and the JSON overlay endpoints."""

from __future__ import annotations

from datetime import timedelta, tzinfo
from typing import Sequence

from pydantic import BaseModel, Field

from market_overlay.config.schema import AllTimeHighConfig, CoinRef
from market_overlay.models import CoinQuote, MarketSnapshot, RarityInfo, SaleEvent
from market_overlay.sales.window import normalized_price, parse_timestamp
from market_overlay.sparkline import SparklineOptions, render_sparkline, trend_class
from market_overlay.views.formatting import (
    PLACEHOLDER,
    format_address,
    format_amount,
    format_compact,
    format_pct,
    format_sale_date,
    format_sale_time,
    format_token_price,
    format_usd,
    format_usd_short,
)

LIVE_SPARKLINE = SparklineOptions(show_end_dot=True)
LONG_SPARKLINE = SparklineOptions(percent=True, as_area=True, show_zero_line=True)


class ChangeView(BaseModel):
    label: str
    text: str
    trend: str


class MetricsView(BaseModel):
    symbol: str
    has_data: bool = False
    price_text: str = PLACEHOLDER
    flip: bool = False
    change_label: str = ""
    change_text: str = PLACEHOLDER
    trend: str = "neutral"
    market_cap_text: str = PLACEHOLDER
    volume_text: str = PLACEHOLDER
    changes: list[ChangeView] = Field(default_factory=list)
    live_delta_text: str = ""
    long_delta_text: str = ""
    high_text: str = PLACEHOLDER
    low_text: str = PLACEHOLDER
    live_sparkline_svg: str = ""
    long_sparkline_svg: str = ""


def _badge_change(snapshot: MarketSnapshot, window: timedelta) -> tuple[str, float | None]:
    for change in snapshot.changes:
        if change.window == window:
            return change.label, change.value
    if snapshot.changes:
        last = snapshot.changes[-1]
        return last.label, last.value
    return "", None


def build_metrics_view(
    snapshot: MarketSnapshot,
    *,
    symbol: str,
    badge_window: timedelta,
    live_values: Sequence[float] = (),
    live_delta_pct: float | None = None,
    live_delta_label: str = "1H",
    long_values: Sequence[float] = (),
    previous_price_text: str | None = None,
) -> MetricsView:
    """Format a snapshot for display. The snapshot itself is never modified.

    The trend class of both sparklines follows the badge change, not the
    shape of the series.
    """
    price_text = format_token_price(snapshot.price_usd)
    label, badge_value = _badge_change(snapshot, badge_window)
    trend = trend_class(badge_value)

    return MetricsView(
        symbol=symbol,
        has_data=snapshot.price_usd is not None,
        price_text=price_text,
        flip=previous_price_text is not None and previous_price_text != price_text,
        change_label=label,
        change_text=format_pct(badge_value),
        trend=trend,
        market_cap_text=format_usd_short(snapshot.market_cap_usd),
        volume_text=format_usd_short(snapshot.volume_24h_usd),
        changes=[
            ChangeView(label=c.label, text=format_pct(c.value), trend=trend_class(c.value))
            for c in snapshot.changes
        ],
        live_delta_text=f"Δ{live_delta_label}: {format_pct(live_delta_pct)}",
        long_delta_text=f"Δ{label}: {format_pct(badge_value)}" if label else "",
        high_text=format_token_price(snapshot.high_usd),
        low_text=format_token_price(snapshot.low_usd),
        live_sparkline_svg=render_sparkline(live_values, trend, LIVE_SPARKLINE),
        long_sparkline_svg=render_sparkline(long_values, trend, LONG_SPARKLINE),
    )


class HighCardView(BaseModel):
    label: str
    name: str = PLACEHOLDER
    price_text: str = ""
    thumb_url: str = ""
    empty: bool = True


class SaleItemView(BaseModel):
    key: str
    name: str
    thumb_url: str = ""
    rarity_label: str | None = None
    rarity_class: str = "other"
    price_text: str = ""
    animating: bool = False
    animation_remaining_ms: int = 0
    date_text: str = ""
    time_text: str = ""
    direction_text: str = ""


class SalesView(BaseModel):
    items: list[SaleItemView] = Field(default_factory=list)
    session_high: HighCardView = Field(
        default_factory=lambda: HighCardView(label="SESSION HIGH 24H"),
    )
    all_time_high: HighCardView = Field(
        default_factory=lambda: HighCardView(label="ALL-TIME HIGH"),
    )
    empty_message: str = "No recent sales. Waiting for activity…"


def sale_price_text(event: SaleEvent) -> str:
    amount = normalized_price(event)
    symbol = event.payment.symbol if event.payment else ""
    return format_amount(amount, symbol)


def build_sale_item(
    event: SaleEvent,
    key: str,
    rarity: RarityInfo | None,
    *,
    animation_remaining_ms: int = 0,
    tz: tzinfo | None = None,
) -> SaleItemView:
    ts = parse_timestamp(event.timestamp)
    seller = format_address(event.seller)
    buyer = format_address(event.buyer)
    return SaleItemView(
        key=key,
        name=event.nft.display_name,
        thumb_url=event.nft.image_url or "",
        rarity_label=rarity.label if rarity else None,
        rarity_class=rarity.rarity_class if rarity else "other",
        price_text=sale_price_text(event),
        animating=animation_remaining_ms > 0,
        animation_remaining_ms=animation_remaining_ms,
        date_text=format_sale_date(ts, tz) if ts else "",
        time_text=format_sale_time(ts, tz) if ts else "",
        direction_text=f"{seller} → {buyer}" if seller and buyer else "",
    )


def build_session_high_card(event: SaleEvent | None, label: str = "SESSION HIGH 24H") -> HighCardView:
    if event is None:
        return HighCardView(label=label)
    return HighCardView(
        label=label,
        name=event.nft.display_name,
        price_text=sale_price_text(event),
        thumb_url=event.nft.image_url or "",
        empty=False,
    )


def build_all_time_high_card(ath: AllTimeHighConfig | None) -> HighCardView:
    """Card for the configured all-time high; a placeholder card when unset."""
    label = "ALL-TIME HIGH"
    if ath is None or not ath.symbol or not ath.name:
        return HighCardView(label=label)
    return HighCardView(
        label=label,
        name=ath.name,
        price_text=format_amount(ath.amount, ath.symbol),
        thumb_url=ath.thumb_url,
        empty=False,
    )


class CoinRowView(BaseModel):
    symbol: str
    price_text: str = "--"
    change_text: str = "--"
    change_class: str = ""
    volume_text: str = "--"


class CoinListView(BaseModel):
    rows: list[CoinRowView] = Field(default_factory=list)


def build_coin_list_view(coins: Sequence[CoinRef], quotes: Sequence[CoinQuote]) -> CoinListView:
    """One row per configured coin, in config order.

    The 1H change falls back to 24H when the provider omits it; hourly volume
    is approximated as a 24th of the 24H volume.
    """
    by_id = {q.coin_id: q for q in quotes}
    rows: list[CoinRowView] = []
    for coin in coins:
        quote = by_id.get(coin.id)
        if quote is None:
            rows.append(CoinRowView(symbol=coin.symbol))
            continue
        change = quote.change_1h_pct if quote.change_1h_pct is not None else quote.change_24h_pct
        change_class = ""
        if change is not None and change > 0:
            change_class = "is-up"
        elif change is not None and change < 0:
            change_class = "is-down"
        volume_1h = quote.volume_24h_usd / 24 if quote.volume_24h_usd is not None else None
        rows.append(CoinRowView(
            symbol=coin.symbol,
            price_text=format_usd(quote.price_usd),
            change_text=f"{change:.2f}%" if change is not None else "--",
            change_class=change_class,
            volume_text=format_compact(volume_1h),
        ))
    return CoinListView(rows=rows)
