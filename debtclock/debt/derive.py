"""Pure derivations from a (latest, previous) pair of Debt to the Penny records."""

from __future__ import annotations

from decimal import Decimal
from fractions import Fraction
from typing import Optional

from debtclock.config import Settings
from debtclock.debt.models import (
    Composition,
    DebtRecord,
    DerivedMetrics,
    PerSecondDeltas,
    StaticKpis,
)

SECONDS_PER_DAY = 86_400

WINDOW_SECONDS = {
    "sec": 1,
    "min": 60,
    "hr": 3_600,
    "day": SECONDS_PER_DAY,
}


def to_decimal(x: Fraction) -> Decimal:
    return Decimal(x.numerator) / Decimal(x.denominator)


def daily_change(latest: Optional[DebtRecord], previous: Optional[DebtRecord]) -> Decimal:
    """latest - previous total; zero when either side is missing."""
    cur = latest.total_debt if latest is not None else None
    prev = previous.total_debt if previous is not None else None
    if cur is None or prev is None:
        return Decimal(0)
    return cur - prev


def per_second_rate(change: Decimal) -> Fraction:
    # Kept rational so rate * 86400 gives back the daily change exactly.
    return Fraction(change) / SECONDS_PER_DAY


def delta_for_window(rate: Fraction, seconds: int) -> Fraction:
    return rate * seconds


def per_second_deltas(rate: Fraction) -> PerSecondDeltas:
    return PerSecondDeltas(**{k: delta_for_window(rate, s) for k, s in WINDOW_SECONDS.items()})


def per_capita(display_value: Optional[Decimal], population: int) -> Optional[Decimal]:
    if display_value is None or population <= 0:
        return None
    return display_value / population


def per_taxpayer(display_value: Optional[Decimal], taxpayers: int) -> Optional[Decimal]:
    if display_value is None or taxpayers <= 0:
        return None
    return display_value / taxpayers


def derive_metrics(
    latest: Optional[DebtRecord],
    previous: Optional[DebtRecord],
    *,
    display_value: Optional[Decimal],
    population: int,
    taxpayers: int,
) -> DerivedMetrics:
    """
    Recompute every derived metric in one go.

    The rate depends only on the record pair; per-capita and per-taxpayer follow
    whatever value is currently on screen (the ticking estimate, if any).
    """
    change = daily_change(latest, previous)
    return DerivedMetrics(
        daily_change=change,
        per_second_rate=per_second_rate(change),
        per_capita=per_capita(display_value, population),
        per_taxpayer=per_taxpayer(display_value, taxpayers),
    )


def composition(latest: Optional[DebtRecord]) -> Composition:
    if latest is None:
        return Composition(public=None, intragovernmental=None)
    return Composition(public=latest.public_held_debt, intragovernmental=latest.intragovernmental_debt)


def static_kpis(settings: Settings) -> StaticKpis:
    return StaticKpis(
        debt_to_gdp_pct=settings.mock_debt_to_gdp * 100.0,
        est_interest_annual=settings.mock_est_interest_annual,
    )
