from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

import pytest

from conftest import DAILY_STEP, LATEST_TOTAL, PREVIOUS_TOTAL

from debtclock.config import Settings
from debtclock.debt.derive import (
    composition,
    daily_change,
    delta_for_window,
    derive_metrics,
    per_capita,
    per_second_deltas,
    per_second_rate,
    per_taxpayer,
    static_kpis,
)
from debtclock.debt.models import DebtRecord


def _rec(total, public=None, intragov=None, d="2024-03-01") -> DebtRecord:
    return DebtRecord(record_date=d, total_debt=total, public_held_debt=public, intragovernmental_debt=intragov)


def test_realistic_daily_change_and_rate():
    latest, previous = _rec(LATEST_TOTAL), _rec(PREVIOUS_TOTAL)
    change = daily_change(latest, previous)
    assert change == DAILY_STEP
    assert per_second_rate(change) == Fraction(25_000)

    deltas = per_second_deltas(per_second_rate(change))
    # /day must match the daily change to the cent (exactly, in fact).
    assert deltas.day == Fraction(change)
    assert Decimal(deltas.day.numerator) / deltas.day.denominator == Decimal("2160000000.00")


@pytest.mark.parametrize(
    "latest,previous",
    [
        (Decimal("34000000000001.37"), Decimal("34000000000000.00")),
        (Decimal("35123456789012.34"), Decimal("35123999999999.99")),
        (Decimal("1"), Decimal("0")),
    ],
)
def test_window_deltas_are_exactly_consistent(latest, previous):
    change = daily_change(_rec(latest), _rec(previous))
    assert change == latest - previous
    d = per_second_deltas(per_second_rate(change))
    assert d.min == d.sec * 60
    assert d.hr == d.sec * 3600
    assert d.day == d.sec * 86400
    assert d.day == Fraction(change)


def test_negative_change_is_allowed():
    change = daily_change(_rec(Decimal("100")), _rec(Decimal("186500")))
    assert change == Decimal("-186400")
    assert delta_for_window(per_second_rate(change), 1) < 0


def test_missing_operand_means_zero_change():
    assert daily_change(_rec(None), _rec(PREVIOUS_TOTAL)) == 0
    assert daily_change(_rec(LATEST_TOTAL), None) == 0
    assert per_second_rate(Decimal(0)) == 0


def test_per_capita_scales_linearly_with_population_only():
    value = Decimal("33500000000000")
    base = derive_metrics(None, None, display_value=value, population=335_000_000, taxpayers=168_000_000)
    doubled = derive_metrics(None, None, display_value=value, population=670_000_000, taxpayers=168_000_000)

    assert base.per_capita == Decimal("100000")
    assert doubled.per_capita == base.per_capita / 2
    assert doubled.per_taxpayer == base.per_taxpayer


def test_kpis_follow_missing_display_value():
    assert per_capita(None, 335_000_000) is None
    assert per_taxpayer(None, 168_000_000) is None


def test_composition_shares():
    comp = composition(_rec(Decimal("100"), Decimal("75"), Decimal("25")))
    assert comp.public_share == pytest.approx(0.75)
    assert comp.intragovernmental_share == pytest.approx(0.25)

    empty = composition(_rec(None, None, None))
    assert empty.public_share is None
    assert composition(None).public is None


def test_static_kpis_are_flagged_not_live():
    kpis = static_kpis(Settings(DEBTCLOCK_MOCK_DEBT_TO_GDP=1.25))
    assert kpis.live is False
    assert kpis.debt_to_gdp_pct == pytest.approx(125.0)
    assert kpis.est_interest_annual == pytest.approx(0.79e12)
