"""Sale identity and first-seen animation windows."""

from __future__ import annotations

from market_overlay.models.sales import SaleEvent


def event_key(event: SaleEvent) -> str:
    """Stable identity: id, contract, token id and timestamp, pipe-joined, empties dropped."""
    ts = "" if event.timestamp is None else str(event.timestamp)
    parts = [event.id, event.nft.contract or "", event.nft.identifier or "", ts]
    return "|".join(p for p in parts if p)


class SaleAnimationTracker:
    """Maps an event key to the end of its "just sold" animation window.

    An entry is written once, on first observation, and never updated or
    evicted afterwards.
    """

    def __init__(self, duration_ms: int = 5000) -> None:
        self.duration_ms = duration_ms
        self._ends: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._ends)

    def __contains__(self, key: str) -> bool:
        return key in self._ends

    def observe(self, key: str, now_ms: int) -> int:
        """Record *key* as seen at *now_ms* if new; return its animation end time."""
        end = self._ends.get(key)
        if end is None:
            end = now_ms + self.duration_ms
            self._ends[key] = end
        return end

    def remaining_ms(self, key: str, now_ms: int) -> int:
        end = self._ends.get(key)
        if end is None:
            return 0
        return max(0, end - now_ms)

    def is_animating(self, key: str, now_ms: int) -> bool:
        return self.remaining_ms(key, now_ms) > 0
