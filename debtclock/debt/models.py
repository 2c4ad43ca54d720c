from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from debtclock.config import DisplayOptions

logger = logging.getLogger(__name__)


def parse_amount(raw: Any) -> Optional[Decimal]:
    """
    FiscalData ships amounts as strings ("36218605243068.34", sometimes "null").
    Anything that is not a finite number becomes None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        logger.debug("Unparseable amount %r", raw)
        return None
    if not value.is_finite():
        logger.debug("Non-finite amount %r", raw)
        return None
    return value


class DebtRecord(BaseModel):
    """One Debt to the Penny row. Field names follow the API via aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    record_date: Optional[str] = None
    total_debt: Optional[Decimal] = Field(default=None, alias="tot_pub_debt_out_amt")
    public_held_debt: Optional[Decimal] = Field(default=None, alias="debt_held_public_amt")
    intragovernmental_debt: Optional[Decimal] = Field(default=None, alias="intragov_hold_amt")

    @field_validator("total_debt", "public_held_debt", "intragovernmental_debt", mode="before")
    @classmethod
    def _parse_amount(cls, v: Any) -> Optional[Decimal]:
        return parse_amount(v)

    @field_validator("record_date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None


class TrendPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    value: Optional[Decimal] = None


@dataclass(frozen=True)
class DebtSnapshot:
    latest: Optional[DebtRecord]
    previous: Optional[DebtRecord]
    trend: Tuple[TrendPoint, ...]


# ---------------------------------------------------------------------------
# Fetch lifecycle: Loading -> Ready | Failed, never re-entered
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Ready:
    snapshot: DebtSnapshot

    @property
    def latest(self) -> Optional[DebtRecord]:
        return self.snapshot.latest

    @property
    def previous(self) -> Optional[DebtRecord]:
        return self.snapshot.previous

    @property
    def trend(self) -> Tuple[TrendPoint, ...]:
        return self.snapshot.trend


@dataclass(frozen=True)
class Failed:
    message: str


FetchState = Union[Loading, Ready, Failed]


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PerSecondDeltas:
    """Debt added per window, all from one linear per-second rate."""

    sec: Fraction
    min: Fraction
    hr: Fraction
    day: Fraction


@dataclass(frozen=True)
class DerivedMetrics:
    daily_change: Decimal
    per_second_rate: Fraction
    per_capita: Optional[Decimal]
    per_taxpayer: Optional[Decimal]


@dataclass(frozen=True)
class Composition:
    public: Optional[Decimal]
    intragovernmental: Optional[Decimal]

    @property
    def total(self) -> Decimal:
        return (self.public or Decimal(0)) + (self.intragovernmental or Decimal(0))

    @property
    def public_share(self) -> Optional[float]:
        if self.total <= 0:
            return None
        return float((self.public or Decimal(0)) / self.total)

    @property
    def intragovernmental_share(self) -> Optional[float]:
        if self.total <= 0:
            return None
        return float((self.intragovernmental or Decimal(0)) / self.total)


@dataclass(frozen=True)
class StaticKpis:
    """Placeholder KPIs read from configuration; never derived from fetched data."""

    debt_to_gdp_pct: float
    est_interest_annual: float
    live: bool = False


@dataclass(frozen=True)
class TickerState:
    anchor_value: Decimal
    elapsed_since_anchor: float = 0.0


@dataclass(frozen=True)
class DashboardView:
    """Everything the presentation layer needs for one frame."""

    display_value: Optional[Decimal]
    daily_change: Decimal
    per_second_deltas: PerSecondDeltas
    per_capita: Optional[Decimal]
    per_taxpayer: Optional[Decimal]
    trend: Tuple[TrendPoint, ...]
    composition: Composition
    static_kpis: StaticKpis
    record_date: Optional[str]
    fetch_state: FetchState
    options: DisplayOptions

    @property
    def loading(self) -> bool:
        return isinstance(self.fetch_state, Loading)

    @property
    def error(self) -> Optional[str]:
        if isinstance(self.fetch_state, Failed):
            return self.fetch_state.message
        return None
