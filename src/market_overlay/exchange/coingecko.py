"""CoinGecko client — REST API.

Two endpoints are used: ``/coins/{id}/market_chart`` for the price, market
cap and volume history behind the ticker, and ``/coins/markets`` for the
multi-coin snapshot. An API key is optional; without one requests go to the
public tier with looser rate limits.
"""

from __future__ import annotations

import math
from typing import Any

import httpx

from market_overlay.errors import MalformedResponse, UpstreamUnavailable
from market_overlay.models import CoinQuote, MarketSeries, TimeSeriesSample

PROVIDER = "coingecko"


class CoinGeckoClient:
    """Async client for the CoinGecko API."""

    def __init__(
        self,
        base_url: str = "https://api.coingecko.com/api/v3",
        api_key: str | None = None,
        api_key_header: str = "x-cg-demo-api-key",
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.api_key_header = api_key_header
        self._timeout_s = timeout_s
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport)
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers[self.api_key_header] = self.api_key
        return headers

    async def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        """GET without raising on status; network failures become UpstreamUnavailable."""
        http = await self._get_http()
        try:
            return await http.get(f"{self.base_url}{path}", params=params, headers=self._headers())
        except httpx.RequestError as exc:
            raise UpstreamUnavailable(PROVIDER, detail=str(exc)) from exc

    @staticmethod
    def _json_or_raise(resp: httpx.Response) -> Any:
        if not resp.is_success:
            raise UpstreamUnavailable(PROVIDER, status=resp.status_code, detail=resp.text[:200])
        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponse(PROVIDER, "body is not JSON") from exc

    # --- market chart ---

    async def fetch_market_chart(
        self,
        asset_id: str,
        vs_currency: str = "usd",
        days: int | str = 7,
        interval: str | None = None,
    ) -> httpx.Response:
        """Raw ``/coins/{id}/market_chart`` response, whatever its status."""
        params: dict[str, Any] = {"vs_currency": vs_currency, "days": days}
        if interval:
            params["interval"] = interval
        return await self._get(f"/coins/{asset_id}/market_chart", params)

    async def get_market_chart(
        self,
        asset_id: str,
        vs_currency: str = "usd",
        days: int | str = 7,
        interval: str | None = None,
    ) -> MarketSeries:
        resp = await self.fetch_market_chart(asset_id, vs_currency, days, interval)
        return self.parse_market_chart(self._json_or_raise(resp))

    @staticmethod
    def parse_series(raw: Any, field: str) -> list[TimeSeriesSample]:
        """Parse ``[[timestamp_ms, value], ...]`` pairs, skipping null values.

        Raises MalformedResponse when *raw* is not a list of pairs.
        """
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise MalformedResponse(PROVIDER, f"{field} is not a list")
        samples: list[TimeSeriesSample] = []
        for pair in raw:
            if not isinstance(pair, (list, tuple)) or len(pair) < 2:
                raise MalformedResponse(PROVIDER, f"{field} entry is not a [ts, value] pair")
            ts, value = pair[0], pair[1]
            if value is None:
                continue
            try:
                ts_ms, val = int(ts), float(value)
            except (TypeError, ValueError) as exc:
                raise MalformedResponse(PROVIDER, f"{field} entry is not numeric") from exc
            if not math.isfinite(val):
                continue
            samples.append(TimeSeriesSample(timestamp_ms=ts_ms, value=val))
        samples.sort(key=lambda s: s.timestamp_ms)
        return samples

    @classmethod
    def parse_market_chart(cls, body: Any) -> MarketSeries:
        """Map a market_chart body onto MarketSeries. ``prices`` is required."""
        if not isinstance(body, dict) or "prices" not in body:
            raise MalformedResponse(PROVIDER, "market_chart body has no prices")
        return MarketSeries(
            prices=cls.parse_series(body.get("prices"), "prices"),
            market_caps=cls.parse_series(body.get("market_caps"), "market_caps"),
            total_volumes=cls.parse_series(body.get("total_volumes"), "total_volumes"),
        )

    # --- multi-coin snapshot ---

    async def fetch_coin_markets(
        self,
        ids: list[str],
        vs_currency: str = "usd",
    ) -> httpx.Response:
        params = {
            "vs_currency": vs_currency,
            "ids": ",".join(ids),
            "price_change_percentage": "1h",
        }
        return await self._get("/coins/markets", params)

    async def get_coin_markets(self, ids: list[str], vs_currency: str = "usd") -> list[CoinQuote]:
        resp = await self.fetch_coin_markets(ids, vs_currency)
        return self.parse_coin_markets(self._json_or_raise(resp))

    @staticmethod
    def parse_coin_markets(body: Any) -> list[CoinQuote]:
        if not isinstance(body, list):
            raise MalformedResponse(PROVIDER, "coins/markets body is not a list")

        def num(v: Any) -> float | None:
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                return None
            return float(v) if math.isfinite(v) else None

        quotes: list[CoinQuote] = []
        for row in body:
            if not isinstance(row, dict) or not row.get("id"):
                continue
            quotes.append(CoinQuote(
                coin_id=str(row["id"]),
                symbol=str(row.get("symbol") or "").upper(),
                price_usd=num(row.get("current_price")),
                change_1h_pct=num(row.get("price_change_percentage_1h_in_currency")),
                change_24h_pct=num(row.get("price_change_percentage_24h")),
                volume_24h_usd=num(row.get("total_volume")),
            ))
        return quotes
