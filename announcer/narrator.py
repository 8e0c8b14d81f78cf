"""
Tick narrator.

Decides which countdown ticks deserve a spoken "time left" message. The
countdown engine reports every second; announcing every second would be
noise in a darkroom, so only round marks are spoken.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from timer_core import PhraseKey, Step

from .base import Announcer


@dataclass(frozen=True)
class NarrationPolicy:
    """Announcement marks in seconds."""

    interval_seconds: int = 30
    final_interval_seconds: int = 10
    final_countdown_seconds: int = 5

    def __post_init__(self):
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if self.final_interval_seconds <= 0:
            raise ValueError("final_interval_seconds must be positive")
        if self.final_countdown_seconds < 0:
            raise ValueError("final_countdown_seconds must not be negative")

    def should_announce(self, remaining: int) -> bool:
        if remaining <= 0:
            return False
        if remaining <= self.final_countdown_seconds:
            return True
        if remaining <= 60:
            return remaining % self.final_interval_seconds == 0
        return remaining % self.interval_seconds == 0


class TickNarrator:
    """
    on_tick callback that speaks the step's time-left phrase at policy marks.

    The first tick is skipped (the ready phrase already named the full
    duration), and so is the closing 0 tick (the complete phrase follows).
    Inside the final countdown only the bare number is spoken.
    """

    def __init__(self, step: Step, announcer: Announcer, policy: Optional[NarrationPolicy] = None):
        self.step = step
        self.announcer = announcer
        self.policy = policy or NarrationPolicy()
        self.last_remaining: Optional[int] = None
        self._last_announced: Optional[int] = None
        self._first = True

    def __call__(self, remaining: int) -> None:
        self.last_remaining = remaining
        if self._first:
            self._first = False
            return
        if remaining == self._last_announced or not self.policy.should_announce(remaining):
            return
        self._last_announced = remaining

        if remaining <= self.policy.final_countdown_seconds:
            self.announcer.say(str(remaining))
        else:
            self.announcer.say(self.step.phrase(PhraseKey.TIME_LEFT, seconds_remaining=remaining))
