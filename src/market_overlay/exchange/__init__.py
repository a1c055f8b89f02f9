"""Upstream API clients."""

from market_overlay.exchange.coingecko import CoinGeckoClient
from market_overlay.exchange.opensea import OpenSeaClient, clamp_limit

__all__ = ["CoinGeckoClient", "OpenSeaClient", "clamp_limit"]
