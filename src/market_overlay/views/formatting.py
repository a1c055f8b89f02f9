"""Display formatting helpers. Missing values render as an em dash placeholder."""

from __future__ import annotations

import html
import math
from datetime import datetime, tzinfo
from decimal import Decimal

PLACEHOLDER = "—"


def _missing(n: float | Decimal | None) -> bool:
    if n is None:
        return True
    if isinstance(n, Decimal):
        return not n.is_finite()
    return not math.isfinite(n)


def sanitize(value: object) -> str:
    """HTML-escape *value* for text and attribute positions.

    None and empty strings become ""; 0 is kept as "0".
    """
    if value is None or value == "":
        return ""
    return html.escape(str(value), quote=True)


def format_token_price(n: float | None) -> str:
    """$0.0123 below one dollar, $1.234 above."""
    if _missing(n):
        return PLACEHOLDER
    return f"${n:.4f}" if n < 1 else f"${n:.3f}"


def format_usd_short(n: float | None) -> str:
    if _missing(n):
        return PLACEHOLDER
    a = abs(n)
    if a >= 1e9:
        return f"${n / 1e9:.2f}B"
    if a >= 1e6:
        return f"${n / 1e6:.2f}M"
    if a >= 1e3:
        return f"${n / 1e3:.2f}K"
    return f"${n:.2f}"


def format_pct(n: float | None) -> str:
    if _missing(n):
        return PLACEHOLDER
    sign = "+" if n > 0 else ""
    return f"{sign}{n:.2f}%"


def format_usd(n: float | None) -> str:
    """Coin list price: more decimals for cheaper coins."""
    if _missing(n):
        return "--"
    decimals = 2
    if n < 1:
        decimals = 4
    if n < 0.01:
        decimals = 6
    return f"${n:.{decimals}f}"


def format_compact(n: float | None) -> str:
    if _missing(n):
        return "--"
    a = abs(n)
    if a >= 1e9:
        return f"{n / 1e9:.1f}B"
    if a >= 1e6:
        return f"{n / 1e6:.1f}M"
    if a >= 1e3:
        return f"{n / 1e3:.1f}K"
    return f"{n:.0f}"


def format_amount(amount: Decimal | float | None, symbol: str = "") -> str:
    """Sale amount with two decimals and the payment symbol: ``12.50 GUN``."""
    if _missing(amount):
        return ""
    return f"{amount:.2f} {symbol}".strip()


def format_address(addr: str | None) -> str:
    """Wallet shorthand: an ellipsis and the last four characters."""
    if not addr or not isinstance(addr, str):
        return ""
    return f"…{addr.lower()[-4:]}"


def ordinal_suffix(n: int) -> str:
    if 11 <= n % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def format_sale_date(ts: datetime, tz: tzinfo | None = None) -> str:
    """``Monday, March 3rd``."""
    local = ts.astimezone(tz) if tz is not None else ts
    return f"{local:%A}, {local:%B} {local.day}{ordinal_suffix(local.day)}"


def format_sale_time(ts: datetime, tz: tzinfo | None = None) -> str:
    local = ts.astimezone(tz) if tz is not None else ts
    return f"{local:%H:%M}"
