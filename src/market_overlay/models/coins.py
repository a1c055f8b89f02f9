"""Multi-coin snapshot model."""

from __future__ import annotations

from pydantic import BaseModel


class CoinQuote(BaseModel):
    """One row of the CoinGecko /coins/markets response."""

    coin_id: str
    symbol: str
    price_usd: float | None = None
    change_1h_pct: float | None = None
    change_24h_pct: float | None = None
    volume_24h_usd: float | None = None
