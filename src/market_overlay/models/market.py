"""Market data models — time series samples and derived snapshots."""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field


class TimeSeriesSample(BaseModel):
    """One (timestamp, value) observation from the market-data provider."""

    model_config = ConfigDict(frozen=True)

    timestamp_ms: int
    value: float


class MarketSeries(BaseModel):
    """Three parallel series as delivered by the provider, oldest first."""

    model_config = ConfigDict(frozen=True)

    prices: list[TimeSeriesSample] = Field(default_factory=list)
    market_caps: list[TimeSeriesSample] = Field(default_factory=list)
    total_volumes: list[TimeSeriesSample] = Field(default_factory=list)


class WindowChange(BaseModel):
    """Percentage change of the latest price against the sample one window ago."""

    window: timedelta
    label: str
    value: float | None = None


class MarketSnapshot(BaseModel):
    """Point-in-time metrics, recomputed on every poll. Every field may be None."""

    price_usd: float | None = None
    market_cap_usd: float | None = None
    volume_24h_usd: float | None = None
    changes: list[WindowChange] = Field(default_factory=list)
    high_usd: float | None = None
    low_usd: float | None = None
    high_low_window: timedelta | None = None

    @classmethod
    def empty(cls, windows: list[timedelta] | None = None) -> MarketSnapshot:
        """The "no data" snapshot, with a null change per requested window."""
        return cls(changes=[
            WindowChange(window=w, label=window_label(w)) for w in windows or []
        ])

    def change_for(self, window: timedelta) -> float | None:
        for change in self.changes:
            if change.window == window:
                return change.value
        return None


def window_label(window: timedelta) -> str:
    """Badge label for a look-back window: 1H, 4H, 24H, 7D."""
    seconds = int(window.total_seconds())
    if seconds % 86400 == 0 and seconds >= 7 * 86400:
        return f"{seconds // 86400}D"
    if seconds % 3600 == 0:
        return f"{seconds // 3600}H"
    return f"{seconds // 60}M"
