"""OpenSea client — collection events API (v2).

Responses have appeared in more than one shape: events under
``asset_events`` or ``events``, the item under ``nft`` or ``asset``, and
several candidate fields for ids, contracts and timestamps. The parsers here
map all of them onto one SaleEvent.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from market_overlay.errors import MalformedResponse, MissingApiKey, UpstreamUnavailable
from market_overlay.models import NftRef, Payment, SaleEvent

PROVIDER = "opensea"

DEFAULT_LIMIT = 10
MAX_LIMIT = 50


def clamp_limit(raw: Any) -> int:
    """Parse a client-supplied limit: default 10, at most 50."""
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def _first(d: dict, *keys: str) -> Any:
    for key in keys:
        value = d.get(key)
        if value not in (None, ""):
            return value
    return None


class OpenSeaClient:
    """Async client for the OpenSea events API. Requires an API key."""

    def __init__(
        self,
        base_url: str = "https://api.opensea.io/api/v2",
        api_key: str | None = None,
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
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

    async def fetch_sale_events(self, collection: str, limit: Any = DEFAULT_LIMIT) -> httpx.Response:
        """Raw ``/events/collection/{slug}?event_type=sale`` response, whatever its status.

        Raises MissingApiKey before any network access when no key is configured.
        """
        if not self.api_key:
            raise MissingApiKey(PROVIDER)
        http = await self._get_http()
        url = f"{self.base_url}/events/collection/{quote(collection, safe='')}"
        params = {"event_type": "sale", "limit": clamp_limit(limit)}
        headers = {"Accept": "application/json", "X-API-KEY": self.api_key}
        try:
            return await http.get(url, params=params, headers=headers)
        except httpx.RequestError as exc:
            raise UpstreamUnavailable(PROVIDER, detail=str(exc)) from exc

    async def get_sale_events(self, collection: str, limit: Any = DEFAULT_LIMIT) -> list[SaleEvent]:
        resp = await self.fetch_sale_events(collection, limit)
        if not resp.is_success:
            raise UpstreamUnavailable(PROVIDER, status=resp.status_code, detail=resp.text[:200])
        try:
            body = resp.json()
        except ValueError as exc:
            raise MalformedResponse(PROVIDER, "body is not JSON") from exc
        return self.parse_sale_events(body)

    @classmethod
    def parse_sale_events(cls, body: Any) -> list[SaleEvent]:
        """Extract sale events from ``asset_events`` or ``events``."""
        if not isinstance(body, dict):
            raise MalformedResponse(PROVIDER, "events body is not an object")
        raw_events = body.get("asset_events")
        if not isinstance(raw_events, list):
            raw_events = body.get("events")
        if not isinstance(raw_events, list):
            raise MalformedResponse(PROVIDER, "events body has no asset_events/events list")
        return [cls.parse_sale_event(ev) for ev in raw_events if isinstance(ev, dict)]

    @staticmethod
    def parse_sale_event(ev: dict) -> SaleEvent:
        """Normalize one upstream event dict into a SaleEvent."""
        raw_nft = ev.get("nft") or ev.get("asset") or {}
        if not isinstance(raw_nft, dict):
            raw_nft = {}

        identifier = _first(raw_nft, "identifier", "token_id")
        nft = NftRef(
            name=raw_nft.get("name") or None,
            identifier=str(identifier) if identifier is not None else None,
            image_url=_first(raw_nft, "display_image_url", "image_url"),
            metadata_url=raw_nft.get("metadata_url") or None,
            collection=raw_nft.get("collection") or None,
            contract=_first(raw_nft, "contract", "contract_address", "asset_contract_address"),
        )

        payment = None
        raw_payment = ev.get("payment")
        if isinstance(raw_payment, dict) and raw_payment.get("quantity") not in (None, ""):
            try:
                decimals = int(raw_payment.get("decimals", 18))
            except (TypeError, ValueError):
                decimals = 18
            payment = Payment(
                quantity_raw=str(raw_payment["quantity"]),
                decimals=decimals,
                symbol=str(raw_payment.get("symbol") or ""),
            )

        event_id = _first(ev, "id", "event_id", "order_hash", "transaction_hash", "tx_hash")
        timestamp = _first(ev, "event_timestamp", "closing_date", "created_date", "occurred_at")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float, str)):
            timestamp = None
        seller = ev.get("seller")
        buyer = ev.get("buyer")
        return SaleEvent(
            id=str(event_id) if event_id is not None else "",
            nft=nft,
            payment=payment,
            seller=seller if isinstance(seller, str) else None,
            buyer=buyer if isinstance(buyer, str) else None,
            timestamp=timestamp,
            event_type=str(ev.get("event_type") or "sale"),
        )
