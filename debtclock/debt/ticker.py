"""
Live counter that interpolates the headline debt between daily refreshes.

The ticker holds an anchor (the latest published total) and, while enabled,
advances a drift of `rate * elapsed` on a fixed-interval callback scheduled
with the event loop's `call_later`. Every new anchor zeroes the drift.
"""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Optional, Protocol

from debtclock.debt.derive import to_decimal
from debtclock.debt.models import TickerState

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.1


class FrameScheduler(Protocol):
    """The slice of asyncio.AbstractEventLoop the ticker needs."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Any:
        ...


class Ticker:
    def __init__(
        self,
        scheduler: FrameScheduler,
        *,
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        on_frame: Optional[Callable[[Optional[Decimal]], None]] = None,
    ):
        self.interval = interval
        self.frames = 0
        self._scheduler = scheduler
        self._clock = clock
        self._on_frame = on_frame
        self._state: Optional[TickerState] = None
        self._rate = Fraction(0)
        self._enabled = False
        self._closed = False
        self._handle: Any = None
        self._last_frame = 0.0

    @property
    def state(self) -> Optional[TickerState]:
        return self._state

    @property
    def rate(self) -> Fraction:
        return self._rate

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def display_value(self) -> Optional[Decimal]:
        """anchor + drift while enabled, the bare anchor otherwise, None without data."""
        if self._state is None:
            return None
        if not self._enabled:
            return self._state.anchor_value
        drift = self._rate * Fraction(self._state.elapsed_since_anchor)
        return self._state.anchor_value + to_decimal(drift)

    def anchor(self, value: Optional[Decimal], rate: Fraction) -> None:
        """Reset to a freshly fetched total; None unsets the anchor and stops ticking."""
        self._rate = rate
        self._state = TickerState(anchor_value=value) if value is not None else None
        if self.running:
            self._last_frame = self._clock()
        self._sync()

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        self._sync()

    def close(self) -> None:
        self._closed = True
        self._sync()

    def _sync(self) -> None:
        should_run = self._enabled and self._state is not None and not self._closed
        if should_run and self._handle is None:
            self._last_frame = self._clock()
            self._schedule()
            logger.debug("Ticker running at %.3fs", self.interval)
        elif not should_run and self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug("Ticker idle after %d frames", self.frames)

    def _schedule(self) -> None:
        self._handle = self._scheduler.call_later(self.interval, self._frame)

    def _frame(self) -> None:
        self._handle = None
        if self._closed or not self._enabled or self._state is None:
            return

        now = self._clock()
        dt = max(0.0, now - self._last_frame)
        self._last_frame = now
        self._state = replace(self._state, elapsed_since_anchor=self._state.elapsed_since_anchor + dt)
        self.frames += 1

        # Reschedule first so a listener that disables us cancels the next frame.
        self._schedule()
        if self._on_frame is not None:
            self._on_frame(self.display_value)
