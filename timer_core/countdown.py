"""
Countdown engine.

Drives one step's countdown: reads a monotonic clock, reports whole seconds
remaining once per second and stops when the duration has elapsed or the
caller cancels.

Ticks are derived from the clock on every iteration, never from a
decremented counter, so slow tick callbacks do not stretch the countdown.
"""

import threading
import time
from enum import Enum
from typing import Callable, Optional

from logging_setup import get_logger, Component

from .errors import AlreadyRunning, InvalidArgument

logger = get_logger(Component.TIMER_CORE)

TickCallback = Callable[[int], None]
Clock = Callable[[], float]


class CountdownState(str, Enum):
    """Countdown states (IDLE -> RUNNING -> COMPLETED | ABORTED)."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (CountdownState.COMPLETED, CountdownState.ABORTED)


class CancelSignal:
    """
    Cooperative cancellation token.

    The engine waits on it between ticks, so cancel() wakes a sleeping
    countdown immediately.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)


class CountdownEngine:
    """One countdown invocation over ``duration_seconds``."""

    def __init__(self, duration_seconds: int, *, clock: Clock = time.monotonic):
        if duration_seconds <= 0:
            raise InvalidArgument(f"duration_seconds must be positive, got {duration_seconds}")
        self.duration_seconds = duration_seconds
        self.state = CountdownState.IDLE
        self.started_at: Optional[float] = None
        self.last_remaining: Optional[int] = None
        self._clock = clock

    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return self._clock() - self.started_at

    def run(self, on_tick: TickCallback, cancel: Optional[CancelSignal] = None) -> CountdownState:
        """
        Block until the countdown completes or ``cancel`` fires.

        ``on_tick`` receives strictly decreasing remaining seconds. The last
        tick of a completed countdown is 0; an aborted countdown emits
        nothing after the cancellation is observed.
        """
        if self.state is not CountdownState.IDLE:
            raise AlreadyRunning("countdown has already been started")

        cancel = cancel or CancelSignal()
        duration = self.duration_seconds
        self.started_at = self._clock()
        self.state = CountdownState.RUNNING
        logger.debug("Countdown started", duration_seconds=duration)

        try:
            while True:
                if cancel.cancelled:
                    return self._finish(CountdownState.ABORTED)

                elapsed = self.elapsed()
                if elapsed >= duration:
                    break

                whole = int(elapsed)
                remaining = duration - whole
                if self.last_remaining is None or remaining < self.last_remaining:
                    self.last_remaining = remaining
                    on_tick(remaining)

                # sleep to the next whole second counted from the start
                delay = (whole + 1) - self.elapsed()
                if delay > 0 and cancel.wait(delay):
                    return self._finish(CountdownState.ABORTED)

            self.last_remaining = 0
            on_tick(0)
            return self._finish(CountdownState.COMPLETED)
        except BaseException:
            # a failing tick callback ends the countdown
            if self.state is CountdownState.RUNNING:
                self.state = CountdownState.ABORTED
            raise

    def _finish(self, state: CountdownState) -> CountdownState:
        self.state = state
        logger.debug(
            "Countdown finished",
            state=state.value,
            duration_seconds=self.duration_seconds,
            elapsed_ms=int(self.elapsed() * 1000),
            last_remaining=self.last_remaining,
        )
        return state
