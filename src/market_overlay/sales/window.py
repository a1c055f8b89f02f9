"""Trailing-window filtering and the highest-priced sale."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable, Sequence

from market_overlay.models.sales import SaleEvent

SESSION_WINDOW = timedelta(hours=24)


def parse_timestamp(value: int | float | str | None) -> datetime | None:
    """Parse an upstream event timestamp.

    Numbers (and numeric strings) are unix seconds; other strings are ISO 8601.
    Returns None for missing or malformed values rather than crashing.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            value = float(raw)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            except ValueError:
                return None
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    if not math.isfinite(value):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def filter_window(
    events: Iterable[SaleEvent],
    now: datetime,
    window: timedelta,
) -> list[SaleEvent]:
    """Events at or after ``now - window``; unparseable timestamps are dropped."""
    cutoff = now - window
    kept: list[SaleEvent] = []
    for event in events:
        ts = parse_timestamp(event.timestamp)
        if ts is not None and ts >= cutoff:
            kept.append(event)
    return kept


def normalized_price(event: SaleEvent) -> Decimal | None:
    """``quantity_raw / 10**decimals``; None for missing, non-numeric or zero quantity."""
    payment = event.payment
    if payment is None or not payment.quantity_raw:
        return None
    raw = payment.quantity_raw.strip()
    # Decimal accepts "1_000"; upstream quantities never use digit separators.
    if "_" in raw:
        return None
    try:
        quantity = Decimal(raw)
    except InvalidOperation:
        return None
    if not quantity.is_finite() or quantity == 0:
        return None
    return quantity.scaleb(-payment.decimals)


def max_by_price(events: Sequence[SaleEvent]) -> SaleEvent | None:
    """The event with the strictly greatest normalized price; ties keep the first."""
    best: SaleEvent | None = None
    best_amount: Decimal | None = None
    for event in events:
        amount = normalized_price(event)
        if amount is None:
            continue
        if best_amount is None or amount > best_amount:
            best, best_amount = event, amount
    return best


def session_high(
    events: Sequence[SaleEvent],
    now: datetime,
    window: timedelta = SESSION_WINDOW,
) -> SaleEvent | None:
    """Highest-priced sale inside the trailing *window*."""
    return max_by_price(filter_window(events, now, window))
