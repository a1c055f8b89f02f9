"""Sales feed — windowing, session high, first-seen tracking and rarity."""

from market_overlay.sales.rarity import (
    RarityCache,
    RarityResolver,
    classify_rarity,
    extract_attributes,
    find_rarity_attribute,
    rarity_key,
)
from market_overlay.sales.tracker import SaleAnimationTracker, event_key
from market_overlay.sales.window import (
    filter_window,
    max_by_price,
    normalized_price,
    parse_timestamp,
    session_high,
)

__all__ = [
    "RarityCache",
    "RarityResolver",
    "SaleAnimationTracker",
    "classify_rarity",
    "event_key",
    "extract_attributes",
    "filter_window",
    "find_rarity_attribute",
    "max_by_price",
    "normalized_price",
    "parse_timestamp",
    "rarity_key",
    "session_high",
]
