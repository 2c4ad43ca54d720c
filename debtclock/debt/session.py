from __future__ import annotations

import asyncio
import logging
import time
from decimal import Decimal
from typing import Callable, List, Optional

from debtclock.config import DisplayOptions, Settings, load_settings
from debtclock.data.fiscaldata import FiscalDataClient
from debtclock.debt.derive import composition, derive_metrics, per_second_deltas, static_kpis
from debtclock.debt.models import DashboardView, FetchState, Loading, Ready
from debtclock.debt.signals import load_fetch_state
from debtclock.debt.ticker import FrameScheduler, Ticker

logger = logging.getLogger(__name__)

Listener = Callable[[DashboardView], None]


class DebtDashboard:
    """
    Single owner of the dashboard's mutable state: fetch lifecycle, display
    toggles and the ticker. Everything runs on one event loop; listeners get a
    fresh DashboardView on each fetch completion, toggle and ticker frame.
    """

    def __init__(
        self,
        client: FiscalDataClient,
        settings: Optional[Settings] = None,
        *,
        options: Optional[DisplayOptions] = None,
        scheduler: Optional[FrameScheduler] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or load_settings()
        self.options = options or DisplayOptions()
        self._client = client
        self._fetch_state: FetchState = Loading()
        self._listeners: List[Listener] = []
        self._closed = False
        self.ticker = Ticker(
            scheduler or asyncio.get_running_loop(),
            interval=self.settings.tick_interval,
            clock=clock,
            on_frame=self._on_frame,
        )
        self.ticker.set_enabled(self.options.ticker_on)

    @property
    def fetch_state(self) -> FetchState:
        return self._fetch_state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def display_value(self) -> Optional[Decimal]:
        if not isinstance(self._fetch_state, Ready):
            return None
        return self.ticker.display_value

    # ------------------------------------------------------------------
    # Fetch lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> FetchState:
        """Run the one-and-only fetch; a result landing after close() is dropped."""
        if not isinstance(self._fetch_state, Loading):
            return self._fetch_state
        state = await load_fetch_state(self._client, trend_days=self.settings.trend_days)
        if self._closed:
            logger.debug("Dashboard closed while fetching; discarding %s", type(state).__name__)
            return state
        self.apply_fetch_state(state)
        return state

    def apply_fetch_state(self, state: FetchState) -> None:
        if not isinstance(self._fetch_state, Loading):
            raise RuntimeError("fetch state already settled")
        self._fetch_state = state
        if isinstance(state, Ready):
            latest = state.latest
            rate = derive_metrics(
                latest,
                state.previous,
                display_value=None,
                population=self.settings.population,
                taxpayers=self.settings.taxpayers,
            ).per_second_rate
            # Anchor before notifying so no frame can use a stale anchor.
            self.ticker.anchor(latest.total_debt if latest is not None else None, rate)
        self._emit()

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    def set_compact(self, compact: bool) -> None:
        self.options = self.options.model_copy(update={"compact": bool(compact)})
        self._emit()

    def set_show_deltas(self, show: bool) -> None:
        self.options = self.options.model_copy(update={"show_deltas": bool(show)})
        self._emit()

    def set_ticker_on(self, on: bool) -> None:
        self.options = self.options.model_copy(update={"ticker_on": bool(on)})
        self.ticker.set_enabled(self.options.ticker_on)
        self._emit()

    def toggle_compact(self) -> None:
        self.set_compact(not self.options.compact)

    def toggle_deltas(self) -> None:
        self.set_show_deltas(not self.options.show_deltas)

    def toggle_ticker(self) -> None:
        self.set_ticker_on(not self.options.ticker_on)

    # ------------------------------------------------------------------
    # Presentation boundary
    # ------------------------------------------------------------------

    def view(self) -> DashboardView:
        state = self._fetch_state
        latest = previous = None
        trend = ()
        if isinstance(state, Ready):
            latest, previous, trend = state.latest, state.previous, state.trend

        display = self.display_value
        metrics = derive_metrics(
            latest,
            previous,
            display_value=display,
            population=self.settings.population,
            taxpayers=self.settings.taxpayers,
        )
        return DashboardView(
            display_value=display,
            daily_change=metrics.daily_change,
            per_second_deltas=per_second_deltas(metrics.per_second_rate),
            per_capita=metrics.per_capita,
            per_taxpayer=metrics.per_taxpayer,
            trend=trend,
            composition=composition(latest),
            static_kpis=static_kpis(self.settings),
            record_date=latest.record_date if latest is not None else None,
            fetch_state=state,
            options=self.options,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        self._closed = True
        self.ticker.close()
        self._listeners.clear()

    def _on_frame(self, _value: Optional[Decimal]) -> None:
        if not self._closed:
            self._emit()

    def _emit(self) -> None:
        if self._closed or not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            listener(view)
