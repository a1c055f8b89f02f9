"""Pydantic domain models."""

from market_overlay.models.coins import CoinQuote
from market_overlay.models.market import (
    MarketSeries,
    MarketSnapshot,
    TimeSeriesSample,
    WindowChange,
)
from market_overlay.models.sales import (
    NftRef,
    Payment,
    RarityClass,
    RarityInfo,
    SaleEvent,
)

__all__ = [
    "CoinQuote",
    "MarketSeries",
    "MarketSnapshot",
    "NftRef",
    "Payment",
    "RarityClass",
    "RarityInfo",
    "SaleEvent",
    "TimeSeriesSample",
    "WindowChange",
]
