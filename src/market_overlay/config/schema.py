"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

import re
from datetime import timedelta

from pydantic import BaseModel, Field, field_validator

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd])\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(raw: str) -> timedelta:
    """Parse a short duration like ``"5m"``, ``"4h"`` or ``"7d"``."""
    match = _DURATION_RE.match(raw)
    if match is None:
        raise ValueError(f"invalid duration {raw!r} (expected e.g. '1h', '24h', '7d')")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit.lower()])


def _check_duration(value: str) -> str:
    parse_duration(value)
    return value


class ProviderConfig(BaseModel):
    base_url: str
    api_key: str | None = None
    timeout_s: float = 15.0


class MetricsConfig(BaseModel):
    asset_id: str = "gunz"
    symbol: str = "GUN"
    vs_currency: str = "usd"
    lookback_days: int = 7
    interval: str | None = "hourly"
    poll_interval_s: int = 300
    windows: list[str] = Field(default_factory=lambda: ["1h", "4h", "24h"])
    high_low_window: str = "24h"
    # ~2h of live ticks at the default 5 minute poll interval
    live_buffer_capacity: int = 24
    live_delta_points: int = 12

    @field_validator("windows")
    @classmethod
    def _windows_are_durations(cls, v: list[str]) -> list[str]:
        return [_check_duration(w) for w in v]

    @field_validator("high_low_window")
    @classmethod
    def _high_low_is_duration(cls, v: str) -> str:
        return _check_duration(v)


class AllTimeHighConfig(BaseModel):
    amount: float
    symbol: str
    name: str
    timestamp: int | None = None
    thumb_url: str = ""


class SalesConfig(BaseModel):
    collection: str = "off-the-grid"
    limit: int = 10
    max_items: int = 6
    poll_interval_s: int = 15
    session_window: str = "24h"
    animation_ms: int = 5000
    all_time_high: AllTimeHighConfig | None = None

    @field_validator("session_window")
    @classmethod
    def _session_window_is_duration(cls, v: str) -> str:
        return _check_duration(v)


class CoinRef(BaseModel):
    id: str
    symbol: str


class CoinListConfig(BaseModel):
    enabled: bool = True
    vs_currency: str = "usd"
    poll_interval_s: int = 60
    coins: list[CoinRef] = Field(default_factory=lambda: [
        CoinRef(id="bitcoin", symbol="BTC"),
        CoinRef(id="ethereum", symbol="ETH"),
        CoinRef(id="solana", symbol="SOL"),
    ])


class DisplayConfig(BaseModel):
    timezone: str = "UTC"
    refresh_s: int = 15


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"


class AppConfig(BaseModel):
    coingecko: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(base_url="https://api.coingecko.com/api/v3"),
    )
    opensea: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(base_url="https://api.opensea.io/api/v2"),
    )
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    sales: SalesConfig = Field(default_factory=SalesConfig)
    coins: CoinListConfig = Field(default_factory=CoinListConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
