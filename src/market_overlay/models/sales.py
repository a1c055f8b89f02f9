"""Marketplace models — sale events and rarity."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RarityClass = Literal["common", "uncommon", "rare", "epic", "other"]


class NftRef(BaseModel):
    """The item a sale event refers to."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    identifier: str | None = None
    image_url: str | None = None
    metadata_url: str | None = None
    collection: str | None = None
    contract: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or f"#{self.identifier or '?'}"


class Payment(BaseModel):
    """Raw payment quantity; normalize with ``quantity_raw / 10**decimals``."""

    model_config = ConfigDict(frozen=True)

    quantity_raw: str
    decimals: int = 18
    symbol: str = ""


class SaleEvent(BaseModel):
    """A marketplace sale, canonicalized from whichever upstream shape it came in.

    ``timestamp`` keeps the upstream value (unix seconds or an ISO string) so
    that unparseable timestamps can be dropped downstream instead of here.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    nft: NftRef = Field(default_factory=NftRef)
    payment: Payment | None = None
    seller: str | None = None
    buyer: str | None = None
    timestamp: int | float | str | None = None
    event_type: str = "sale"


class RarityInfo(BaseModel):
    """Rarity label as found in the metadata, plus its display tier."""

    model_config = ConfigDict(frozen=True)

    label: str
    rarity_class: RarityClass
