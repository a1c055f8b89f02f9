"""HTML fragments for the browser source.

Every interpolated text value goes through ``sanitize``; SVG markup comes
from the sparkline renderer, which only emits numbers and fixed class names.
"""

from __future__ import annotations

from market_overlay.views.formatting import PLACEHOLDER, sanitize
from market_overlay.views.models import (
    CoinListView,
    HighCardView,
    MetricsView,
    SaleItemView,
    SalesView,
)


def _error_banner(error: str | None) -> str:
    return f'<div id="error" class="error-banner">{sanitize(error)}</div>'


def render_metrics_html(view: MetricsView, error: str | None = None) -> str:
    price_class = "token-price flip-animate" if view.flip else "token-price"
    change_class = "token-change" if view.trend == "neutral" else f"token-change {view.trend}"
    badge = (
        f"{sanitize(view.change_text)} ({sanitize(view.change_label)})"
        if view.change_label else sanitize(view.change_text)
    )

    long_stats = [view.long_delta_text] if view.long_delta_text else []
    if view.high_text != PLACEHOLDER:
        long_stats.append(f"High: {view.high_text}")
    if view.low_text != PLACEHOLDER:
        long_stats.append(f"Low: {view.low_text}")
    long_stats_html = "".join(
        f'<div class="sparkline-stat-line">{sanitize(line)}</div>' for line in long_stats
    )

    return (
        '<section class="token-metrics">'
        f"{_error_banner(error)}"
        '<div class="token-metric-main">'
        f'<span class="token-label">{sanitize(view.symbol)}</span>'
        f'<span class="{price_class}">{sanitize(view.price_text)}</span>'
        f'<span class="{change_class}">{badge}</span>'
        "</div>"
        '<div class="token-metric-grid">'
        '<div class="metric"><span class="metric-label">Mkt Cap</span>'
        f'<span class="metric-value">{sanitize(view.market_cap_text)}</span></div>'
        '<div class="metric"><span class="metric-label">Vol 24H</span>'
        f'<span class="metric-value">{sanitize(view.volume_text)}</span></div>'
        "</div>"
        '<div class="sparkline-row">'
        f'<div class="sparkline-live">{view.live_sparkline_svg}'
        f'<div class="sparkline-stat">{sanitize(view.live_delta_text)}</div></div>'
        f'<div class="sparkline-long">{view.long_sparkline_svg}'
        f'<div class="sparkline-stat">{long_stats_html}</div></div>'
        "</div>"
        "</section>"
    )


def _high_card(card: HighCardView) -> str:
    thumb = (
        f'<img class="high-thumb" src="{sanitize(card.thumb_url)}" alt="" />'
        if card.thumb_url else ""
    )
    price = f'<div class="high-value">{sanitize(card.price_text)}</div>' if not card.empty else ""
    return (
        '<div class="high-card">'
        f'<div class="high-thumb-wrapper">{thumb}</div>'
        '<div class="high-sale-text">'
        f'<div class="high-label">{sanitize(card.label)}</div>'
        f'<div class="high-value">{sanitize(card.name)}</div>'
        f"{price}"
        "</div></div>"
    )


def _sale_item(item: SaleItemView) -> str:
    rarity_class = sanitize(item.rarity_class)
    thumb = (
        f'<img class="thumb" src="{sanitize(item.thumb_url)}" alt="{sanitize(item.name)}" />'
        if item.thumb_url else '<div class="thumb thumb-placeholder"></div>'
    )
    pill = (
        f'<span class="rarity-pill rarity-{rarity_class}">{sanitize(item.rarity_label)}</span>'
        if item.rarity_label else ""
    )
    label_class = "sale-label sale-animating" if item.animating else "sale-label"
    price_class = "sale-price sale-price-animating" if item.animating else "sale-price sale-price-final"
    when = " • ".join(sanitize(p) for p in (item.date_text, item.time_text) if p)
    direction = (
        f'<div class="direction-line">{sanitize(item.direction_text)}</div>'
        if item.direction_text else ""
    )
    return (
        f'<li class="rarity-{rarity_class}" data-sale-key="{sanitize(item.key)}" '
        f'data-animation-ms="{item.animation_remaining_ms}">'
        '<div class="event-card">'
        f'<div class="thumb-wrapper">{thumb}</div>'
        '<div class="event-main">'
        f'<div class="event-header"><span class="item-name">{sanitize(item.name)}</span>{pill}</div>'
        f'<div class="sale-line"><span class="{label_class}">sale</span>'
        f'<span class="{price_class}">{sanitize(item.price_text)}</span></div>'
        f'<div class="datetime-line">{when}</div>'
        f"{direction}"
        "</div></div></li>"
    )


def render_sales_html(view: SalesView, error: str | None = None) -> str:
    if view.items:
        items = "".join(_sale_item(item) for item in view.items)
    else:
        items = f'<li><div class="empty-state">{sanitize(view.empty_message)}</div></li>'
    return (
        '<section class="sales-feed">'
        f"{_error_banner(error)}"
        f'<div id="high-sale">{_high_card(view.session_high)}{_high_card(view.all_time_high)}</div>'
        f'<ul id="events">{items}</ul>'
        "</section>"
    )


def render_coin_list_html(view: CoinListView, error: str | None = None) -> str:
    rows = "".join(
        f'<div class="coin-row" data-coin-symbol="{sanitize(row.symbol)}">'
        f'<span class="coin-symbol">{sanitize(row.symbol)}</span>'
        f'<span class="coin-price">{sanitize(row.price_text)}</span>'
        f'<span class="coin-change {sanitize(row.change_class)}">{sanitize(row.change_text)}</span>'
        f'<span class="coin-volume">{sanitize(row.volume_text)}</span>'
        "</div>"
        for row in view.rows
    )
    return f'<section class="coin-list">{_error_banner(error)}{rows}</section>'


def render_overlay_page(fragments: list[str], refresh_s: int = 15, title: str = "Market overlay") -> str:
    """Full page wrapping pre-rendered fragments; the browser source reloads it on a timer."""
    body = "".join(fragments)
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8" />'
        f'<meta http-equiv="refresh" content="{int(refresh_s)}" />'
        f"<title>{sanitize(title)}</title>"
        f"</head><body>{body}</body></html>"
    )
