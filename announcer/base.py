"""
Collaborator interfaces for narration and lighting.

The run manager receives these by injection; nothing in the timer core
looks them up globally.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from logging_setup import get_logger, Component
from timer_core import LightMode

from .normalize import munge


class Announcer(Protocol):
    """Speech output."""

    def say(self, text: str) -> None:
        """Start speaking ``text``, interrupting anything still playing."""

    def say_wait(self, text: str) -> None:
        """Speak ``text`` and return once it has finished."""

    def prepare(self, text: str) -> None:
        """Pre-render ``text`` so a later say() starts without delay."""


class LightController(Protocol):
    """Indicator / backlight output."""

    def set_mode(self, mode: LightMode) -> None:
        ...


class LoggingAnnouncer:
    """
    Announcer that writes phrases to the log instead of speaking.

    Used when no speech backend is attached; keeps a history of what would
    have been said.
    """

    def __init__(self, run_id: Optional[str] = None):
        self.logger = get_logger(Component.ANNOUNCER, run_id=run_id)
        self.spoken: List[str] = []
        self.prepared: List[str] = []

    def say(self, text: str) -> None:
        text = munge(text)
        self.spoken.append(text)
        self.logger.info("Announce", text=text)

    def say_wait(self, text: str) -> None:
        text = munge(text)
        self.spoken.append(text)
        self.logger.info("Announce and wait", text=text)

    def prepare(self, text: str) -> None:
        text = munge(text)
        self.prepared.append(text)
        self.logger.debug("Prepared announcement", text=text)


class LoggingLightController:
    """Light controller that logs mode changes and remembers the last one."""

    def __init__(self):
        self.logger = get_logger(Component.LIGHT_CONTROLLER)
        self.mode: LightMode = LightMode.OFF
        self.history: List[LightMode] = []

    def set_mode(self, mode: LightMode) -> None:
        if mode != self.mode:
            self.logger.info("Light mode changed", from_mode=self.mode.value, to_mode=mode.value)
        self.mode = mode
        self.history.append(mode)
