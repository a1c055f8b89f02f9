"""Rarity lookup from NFT metadata documents, memoized per item.

Each unique item is fetched at most once for the life of the process. Failed
fetches and documents without a rarity trait are cached as None too, which
trades the occasional transient miss for bounded network traffic.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from market_overlay.models.sales import NftRef, RarityClass, RarityInfo

log = structlog.get_logger("rarity")

_TRAIT_NAME_HINTS = ("rarity", "tier", "grade", "quality")


class RarityCache:
    """Per-item rarity results, including negative (None) entries. Never evicted."""

    def __init__(self) -> None:
        self._store: dict[str, RarityInfo | None] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> RarityInfo | None:
        return self._store.get(key)

    def set(self, key: str, value: RarityInfo | None) -> None:
        self._store[key] = value


def rarity_key(nft: NftRef) -> str | None:
    """Cache key: the metadata URL, else ``collection:identifier``, else None."""
    if nft.metadata_url:
        return nft.metadata_url
    if nft.collection and nft.identifier:
        return f"{nft.collection}:{nft.identifier}"
    return None


def extract_attributes(doc: Any) -> list[dict]:
    """Trait list from ``attributes``, ``traits`` or ``properties.attributes``."""
    if not isinstance(doc, dict):
        return []
    props = doc.get("properties")
    source = (
        doc.get("attributes")
        or doc.get("traits")
        or (props.get("attributes") if isinstance(props, dict) else None)
        or []
    )
    if not isinstance(source, list):
        return []
    return [a for a in source if isinstance(a, dict)]


def _trait_name(attr: dict) -> str:
    return str(attr.get("trait_type") or attr.get("type") or attr.get("name") or "").lower()


def find_rarity_attribute(attrs: list[dict]) -> dict | None:
    """First trait, in document order, whose name mentions rarity/tier/grade/quality."""
    for attr in attrs:
        name = _trait_name(attr)
        if any(hint in name for hint in _TRAIT_NAME_HINTS):
            return attr
    return None


def classify_rarity(value: str) -> RarityClass:
    """Map a trait value onto a display tier.

    The checks run in the fixed order common, uncommon, epic, rare and a later
    match overrides an earlier one, so "Uncommon Epic Skin" is ``epic``.
    """
    lower = value.lower()
    rarity_class: RarityClass = "other"
    if "common" in lower and "uncommon" not in lower:
        rarity_class = "common"
    if "uncommon" in lower:
        rarity_class = "uncommon"
    if "epic" in lower:
        rarity_class = "epic"
    if "rare" in lower:
        rarity_class = "rare"
    return rarity_class


def rarity_from_document(doc: Any) -> RarityInfo | None:
    """Parse a metadata document into RarityInfo, or None when no rarity trait exists."""
    attr = find_rarity_attribute(extract_attributes(doc))
    if attr is None:
        return None
    raw = attr.get("value")
    if raw is None:
        raw = attr.get("trait_type") or attr.get("name") or ""
    label = str(raw).strip()
    if not label:
        return None
    return RarityInfo(label=label, rarity_class=classify_rarity(label))


class RarityResolver:
    """Resolve rarity for an NFT, fetching its metadata at most once per key."""

    def __init__(self, http: httpx.AsyncClient, cache: RarityCache | None = None) -> None:
        self._http = http
        self.cache = cache if cache is not None else RarityCache()
        self._lock = asyncio.Lock()

    async def resolve(self, nft: NftRef) -> RarityInfo | None:
        key = rarity_key(nft)
        if key is None:
            return None
        if key in self.cache:
            return self.cache.get(key)

        async with self._lock:
            # Another task may have filled the key while we waited.
            if key in self.cache:
                return self.cache.get(key)
            result = await self._fetch(nft)
            self.cache.set(key, result)
            return result

    async def _fetch(self, nft: NftRef) -> RarityInfo | None:
        if not nft.metadata_url:
            return None
        try:
            resp = await self._http.get(
                nft.metadata_url, headers={"Accept": "application/json"},
            )
            resp.raise_for_status()
            doc = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError):
            log.warning("rarity_fetch_failed", url=nft.metadata_url, exc_info=True)
            return None
        return rarity_from_document(doc)
