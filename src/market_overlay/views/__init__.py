"""Display layer — formatting, view models and HTML fragments."""

from market_overlay.views.formatting import sanitize
from market_overlay.views.html import (
    render_coin_list_html,
    render_metrics_html,
    render_overlay_page,
    render_sales_html,
)
from market_overlay.views.models import (
    CoinListView,
    CoinRowView,
    HighCardView,
    MetricsView,
    SaleItemView,
    SalesView,
    build_all_time_high_card,
    build_coin_list_view,
    build_metrics_view,
    build_sale_item,
    build_session_high_card,
)

__all__ = [
    "CoinListView",
    "CoinRowView",
    "HighCardView",
    "MetricsView",
    "SaleItemView",
    "SalesView",
    "build_all_time_high_card",
    "build_coin_list_view",
    "build_metrics_view",
    "build_sale_item",
    "build_session_high_card",
    "render_coin_list_html",
    "render_metrics_html",
    "render_overlay_page",
    "render_sales_html",
    "sanitize",
]
