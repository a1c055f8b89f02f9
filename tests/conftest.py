"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from market_overlay.models import NftRef, Payment, SaleEvent, TimeSeriesSample

T0 = 1_767_225_600_000  # 2026-01-01T00:00:00Z in ms
HOUR_MS = 3_600_000
NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)

_ENV_VARS = (
    "OVERLAY_LOG_LEVEL",
    "OVERLAY_LOG_FORMAT",
    "OVERLAY_HOST",
    "OVERLAY_PORT",
    "COINGECKO_API_KEY",
    "OPENSEA_API_KEY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep host env overrides out of config-dependent tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_series(values: list[float], start_ms: int = T0, step_ms: int = HOUR_MS) -> list[TimeSeriesSample]:
    return [
        TimeSeriesSample(timestamp_ms=start_ms + i * step_ms, value=v)
        for i, v in enumerate(values)
    ]


def make_sale(
    event_id: str = "ev-1",
    quantity: str | None = "1000000000000000000",
    decimals: int = 18,
    symbol: str = "GUN",
    timestamp: int | float | str | None = None,
    name: str | None = "Item",
    identifier: str | None = "1",
    metadata_url: str | None = None,
    collection: str | None = "off-the-grid",
    contract: str | None = "0xcontract",
    seller: str | None = "0xSELLER0001",
    buyer: str | None = "0xBUYER00002",
) -> SaleEvent:
    return SaleEvent(
        id=event_id,
        nft=NftRef(
            name=name,
            identifier=identifier,
            image_url=f"https://img.example/{identifier}.png" if identifier else None,
            metadata_url=metadata_url,
            collection=collection,
            contract=contract,
        ),
        payment=Payment(quantity_raw=quantity, decimals=decimals, symbol=symbol)
        if quantity is not None else None,
        seller=seller,
        buyer=buyer,
        timestamp=timestamp if timestamp is not None else int(NOW.timestamp()) - 60,
    )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def series_factory():
    return make_series


@pytest.fixture
def sale_factory():
    return make_sale
