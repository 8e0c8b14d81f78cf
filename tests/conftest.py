"""
Shared fixtures: a fake monotonic clock and cancel signals that advance it.

Countdown tests run in fake time so they finish instantly and are exact.
"""
from typing import Optional

import pytest

from timer_core import CancelSignal


class FakeTime:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.waits = []

    def clock(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def signal(self, cancel_on_wait: Optional[int] = None, max_step: Optional[float] = None) -> "FakeSignal":
        return FakeSignal(self, cancel_on_wait=cancel_on_wait, max_step=max_step)


class FakeSignal(CancelSignal):
    """
    Cancel signal whose wait() advances fake time instead of sleeping.

    cancel_on_wait: the n-th wait is interrupted halfway by a cancel.
    max_step: wake up early after at most this many seconds.
    """

    def __init__(self, fake_time: FakeTime, cancel_on_wait: Optional[int] = None, max_step: Optional[float] = None):
        super().__init__()
        self.fake_time = fake_time
        self.cancel_on_wait = cancel_on_wait
        self.max_step = max_step
        self.wait_count = 0

    def wait(self, timeout: float) -> bool:
        self.wait_count += 1
        self.fake_time.waits.append(timeout)
        if self.cancel_on_wait is not None and self.wait_count >= self.cancel_on_wait:
            self.fake_time.advance(timeout / 2)
            self.cancel()
            return True
        step = timeout if self.max_step is None else min(timeout, self.max_step)
        self.fake_time.advance(step)
        return self.cancelled


@pytest.fixture
def fake_time():
    return FakeTime()
