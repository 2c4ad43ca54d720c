"""
Display formatting utilities for dashboard output.

Provides consistent en-US formatting for:
- Currency values (compact "36.21T" or expanded "$36,210,456,789")
- Plain numbers and KPI cards
- Signed deltas

Every formatter accepts None (or a non-finite value) and returns PLACEHOLDER.
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction
from typing import Optional, Union

Number = Union[int, float, Decimal, Fraction]

PLACEHOLDER = "—"
MINUS = "−"

_COMPACT_UNITS = ("", "K", "M", "B", "T")


def _to_decimal(x: Optional[Number]) -> Optional[Decimal]:
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, Decimal):
        return x if x.is_finite() else None
    if isinstance(x, Fraction):
        return Decimal(x.numerator) / Decimal(x.denominator)
    if isinstance(x, int):
        return Decimal(x)
    if isinstance(x, float):
        if not math.isfinite(x):
            return None
        return Decimal(repr(x))
    return None


def _round(x: Decimal, decimals: int) -> Decimal:
    return x.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def _group(x: Decimal) -> str:
    """Comma-grouped fixed-point text with trailing fractional zeros removed."""
    text = format(x, ",f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


# ============================================================================
# Number Formatting
# ============================================================================

def fmt_number(x: Optional[Number], decimals: int = 0) -> str:
    """Format with comma separators and at most `decimals` fraction digits."""
    d = _to_decimal(x)
    if d is None:
        return PLACEHOLDER
    r = _round(d, decimals)
    if r == 0:
        r = abs(r)
    return _group(r)


def fmt_compact(x: Optional[Number], max_decimals: int = 2) -> str:
    """
    Short-scale compact notation, e.g. 36_210_000_000_000 -> "36.21T".

    Rounding that carries into the next unit is promoted (999_999 -> "1M").
    """
    d = _to_decimal(x)
    if d is None:
        return PLACEHOLDER

    v = abs(d)
    unit = 0
    while v >= 1000 and unit < len(_COMPACT_UNITS) - 1:
        v = v / 1000
        unit += 1

    r = _round(v, max_decimals)
    if r >= 1000 and unit < len(_COMPACT_UNITS) - 1:
        r = _round(r / 1000, max_decimals)
        unit += 1

    sign = "-" if d < 0 and r != 0 else ""
    return f"{sign}{_group(r)}{_COMPACT_UNITS[unit]}"


# ============================================================================
# Currency Formatting
# ============================================================================

def fmt_usd(x: Optional[Number]) -> str:
    """Whole-dollar USD, e.g. "$36,210,456,789"."""
    d = _to_decimal(x)
    if d is None:
        return PLACEHOLDER
    r = _round(d, 0)
    if r < 0:
        return f"-${_group(abs(r))}"
    return f"${_group(abs(r))}"


def fmt_currency(x: Optional[Number], *, compact: bool) -> str:
    """Headline formatter: compact notation without symbol, or whole-dollar USD."""
    if compact:
        return fmt_compact(x)
    return fmt_usd(x)


def fmt_kpi(
    x: Optional[Number],
    *,
    compact: bool = False,
    prefix: str = "",
    suffix: str = "",
    decimals: int = 0,
) -> str:
    """Format a KPI card value with optional prefix/suffix."""
    if _to_decimal(x) is None:
        return PLACEHOLDER
    body = fmt_compact(x) if compact else fmt_number(x, decimals)
    return f"{prefix}{body}{suffix}"


# ============================================================================
# Deltas
# ============================================================================

def fmt_signed_delta(x: Optional[Number], *, compact: bool) -> str:
    """
    Signed delta for the per-window strip, e.g. "+25K" or "−1,200".

    Missing values read as zero, which is shown as a positive "+0".
    """
    d = _to_decimal(x) or Decimal(0)
    sign = "+" if d >= 0 else MINUS
    magnitude = abs(d)
    body = fmt_compact(magnitude) if compact else fmt_number(magnitude, 0)
    return f"{sign}{body}"
