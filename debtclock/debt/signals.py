from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from debtclock.data.fiscaldata import DEBT_TO_PENNY, FetchError, FiscalDataClient, ParseError
from debtclock.debt.models import DebtRecord, DebtSnapshot, Failed, FetchState, Ready, TrendPoint, parse_amount

logger = logging.getLogger(__name__)

SORT_NEWEST_FIRST = "-record_date"
DEFAULT_TREND_DAYS = 30

_DATE_COL = "record_date"
_TOTAL_COL = "tot_pub_debt_out_amt"


def _first_record(rows: List[Dict[str, Any]]) -> Optional[DebtRecord]:
    if not rows:
        return None
    row = rows[0]
    if not isinstance(row, dict):
        raise ParseError("Treasury API row is not an object")
    return DebtRecord.model_validate(row)


def normalize_trend(rows: List[Dict[str, Any]], *, limit: int = DEFAULT_TREND_DAYS) -> Tuple[TrendPoint, ...]:
    """
    Turn a newest-first page of rows into an oldest-first chart series.

    Rows with an unparseable date are dropped, a repeated date keeps its last
    occurrence, and at most `limit` of the newest points survive. Values that
    are not numeric stay in the series as None.
    """
    rows = [r for r in rows if isinstance(r, dict)]
    if not rows:
        return ()

    df = pd.DataFrame(rows)
    if _DATE_COL not in df.columns:
        return ()
    raw_values = df[_TOTAL_COL] if _TOTAL_COL in df.columns else pd.Series([None] * len(df), index=df.index)

    df = pd.DataFrame(
        {
            "date": pd.to_datetime(df[_DATE_COL], format="%Y-%m-%d", errors="coerce"),
            "raw": raw_values,
        }
    )
    df = df[df["date"].notna()]
    # API order is newest-first; the chart reads left-to-right = old-to-new.
    df = df.iloc[::-1]
    df = df.sort_values("date", kind="stable")
    df = df.drop_duplicates(subset="date", keep="last")
    df = df.tail(limit)

    return tuple(
        TrendPoint(date=ts.date().isoformat(), value=parse_amount(raw))
        for ts, raw in zip(df["date"], df["raw"])
    )


async def fetch_debt_snapshot(client: FiscalDataClient, *, trend_days: int = DEFAULT_TREND_DAYS) -> DebtSnapshot:
    """
    Read latest day, previous day and the trend window concurrently.

    All three requests must succeed; the first FetchError is raised as-is and
    nothing partial is returned.
    """
    latest_rows, previous_rows, trend_rows = await asyncio.gather(
        client.fetch_page(endpoint=DEBT_TO_PENNY, sort=SORT_NEWEST_FIRST, page_number=1, page_size=1),
        client.fetch_page(endpoint=DEBT_TO_PENNY, sort=SORT_NEWEST_FIRST, page_number=2, page_size=1),
        client.fetch_page(endpoint=DEBT_TO_PENNY, sort=SORT_NEWEST_FIRST, page_number=1, page_size=trend_days),
    )

    snapshot = DebtSnapshot(
        latest=_first_record(latest_rows),
        previous=_first_record(previous_rows),
        trend=normalize_trend(trend_rows, limit=trend_days),
    )
    logger.info(
        "Debt snapshot: latest=%s previous=%s trend_points=%d",
        snapshot.latest.record_date if snapshot.latest else None,
        snapshot.previous.record_date if snapshot.previous else None,
        len(snapshot.trend),
    )
    return snapshot


async def load_fetch_state(client: FiscalDataClient, *, trend_days: int = DEFAULT_TREND_DAYS) -> FetchState:
    """Like fetch_debt_snapshot, but folds any FetchError into Failed(message)."""
    try:
        snapshot = await fetch_debt_snapshot(client, trend_days=trend_days)
    except FetchError as e:
        logger.warning("Debt snapshot fetch failed: %s", e)
        return Failed(message=str(e) or e.__class__.__name__)
    return Ready(snapshot=snapshot)
