"""
Pytest configuration and shared fixtures for debtclock tests.

Usage:
    @pytest.fixture functions are automatically available to all tests.
    Import helpers from conftest when needed.
"""
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest


def pytest_configure():
    """
    Ensure the repo root is on sys.path for the flat-layout package (`debtclock`).
    This keeps tests runnable without requiring an editable install.
    """
    root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(root))


# =============================================================================
# Sample Data
# =============================================================================

BASE_URL = "https://api.test/services/api/fiscal_service"

# Previous day 34.000T, latest day +2.16B -> exactly $25,000 per second.
PREVIOUS_TOTAL = Decimal("34000000000000.00")
DAILY_STEP = Decimal("2160000000.00")
LATEST_TOTAL = PREVIOUS_TOTAL + DAILY_STEP
LATEST_DATE = date(2024, 3, 1)


def make_row(
    record_date: str,
    total: Any,
    public: Any = None,
    intragov: Any = None,
) -> Dict[str, Any]:
    """One Debt to the Penny row in wire format (amounts as strings)."""
    if public is None and isinstance(total, Decimal):
        public = (total * Decimal("0.8")).quantize(Decimal("0.01"))
    if intragov is None and isinstance(total, Decimal) and isinstance(public, Decimal):
        intragov = total - public
    return {
        "record_date": record_date,
        "tot_pub_debt_out_amt": str(total),
        "debt_held_public_amt": str(public),
        "intragov_hold_amt": str(intragov),
        "src_line_nbr": "1",
    }


def make_rows(n: int = 35) -> List[Dict[str, Any]]:
    """n consecutive days, newest first, growing by DAILY_STEP per day."""
    rows = []
    for i in range(n):
        d = LATEST_DATE - timedelta(days=i)
        rows.append(make_row(d.isoformat(), LATEST_TOTAL - DAILY_STEP * i))
    return rows


# =============================================================================
# Fake FiscalData API
# =============================================================================

class FakeFiscalDataApi:
    """
    httpx.MockTransport handler that pages through `rows` (newest first).

    `fail[(page_number, page_size)] = status` forces an error response and
    `raw[(page_number, page_size)] = bytes` overrides the body.
    """

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows = make_rows() if rows is None else rows
        self.requests: List[httpx.Request] = []
        self.fail: Dict[Tuple[int, int], int] = {}
        self.raw: Dict[Tuple[int, int], bytes] = {}
        self.exc: Optional[Callable[[httpx.Request], Exception]] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc(request)
        number = int(request.url.params["page[number]"])
        size = int(request.url.params["page[size]"])
        key = (number, size)
        if key in self.fail:
            return httpx.Response(self.fail[key], json={"error": "Internal Server Error"})
        if key in self.raw:
            return httpx.Response(200, content=self.raw[key])
        start = (number - 1) * size
        return httpx.Response(200, json={"data": self.rows[start:start + size], "meta": {"count": size}})

    def client(self):
        from debtclock.data.fiscaldata import FiscalDataClient

        return FiscalDataClient(BASE_URL, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fiscal_api() -> FakeFiscalDataApi:
    return FakeFiscalDataApi()


# =============================================================================
# Fake scheduling
# =============================================================================

class FakeHandle:
    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Records call_later callbacks; run_pending() fires whatever is due."""

    def __init__(self):
        self.handles: List[FakeHandle] = []
        self.delays: List[float] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(lambda: callback(*args))
        self.handles.append(handle)
        self.delays.append(delay)
        return handle

    @property
    def pending(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def run_pending(self) -> int:
        due = self.pending
        for h in due:
            h.fired = True
            h.callback()
        return len(due)


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings():
    from debtclock.config import Settings

    return Settings(
        DEBTCLOCK_API_BASE_URL=BASE_URL,
        DEBTCLOCK_US_POPULATION=335_000_000,
        DEBTCLOCK_US_TAXPAYERS=168_000_000,
        DEBTCLOCK_TICK_INTERVAL=0.1,
    )
