"""
Step: one timed phase of a darkroom process.
"""

import threading
import time
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Union

from logging_setup import get_logger, Component

from .countdown import CancelSignal, Clock, CountdownEngine, CountdownState, TickCallback
from .errors import AlreadyRunning, InvalidArgument, NotTweakable
from .phrases import PhraseKey, build_templates, render_phrase

if TYPE_CHECKING:
    from .process import Process


logger = get_logger(Component.TIMER_CORE)


class LightMode(str, Enum):
    """Indicator / backlight state while a step is active."""
    OFF = "off"
    ON = "on"
    HALF = "half"

    @classmethod
    def parse(cls, value: Union["LightMode", str]) -> "LightMode":
        """
        Accept an enum member, its value, or a one-letter code:
        Y -> on, H -> half, N -> off (case-insensitive).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            code = value.strip().lower()
            if code in _LIGHT_CODES:
                return _LIGHT_CODES[code]
        raise InvalidArgument(f"Unrecognized light mode: {value!r}")


_LIGHT_CODES = {
    "y": LightMode.ON,
    "h": LightMode.HALF,
    "n": LightMode.OFF,
    "on": LightMode.ON,
    "half": LightMode.HALF,
    "off": LightMode.OFF,
}


def parse_duration(value: Union[int, str]) -> int:
    """Positive whole seconds from an int or a string of digits."""
    if isinstance(value, bool):
        raise InvalidArgument(f"duration must be an integer, got {value!r}")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise InvalidArgument(f"duration must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidArgument(f"duration must be positive, got {value}")
    return value


def parse_tweakable(value: Union[bool, str]) -> bool:
    """A bool, or "Y" / "N" (case-insensitive)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().upper() in ("Y", "N"):
        return value.strip().upper() == "Y"
    raise InvalidArgument(f"tweakable flag must be a bool or Y/N, got {value!r}")


class Step:
    """
    One timed phase of a Process.

    Names and light mode are fixed. The duration of a tweakable step may be
    changed through set_duration until its countdown first starts.
    """

    def __init__(
        self,
        process: "Process",
        short_name: str,
        long_name: str,
        duration_seconds: Union[int, str],
        tweakable: Union[bool, str],
        light_mode: Union[LightMode, str],
        *,
        clock: Clock = time.monotonic,
    ):
        if not isinstance(short_name, str) or not short_name.strip():
            raise InvalidArgument("short_name is required")
        if not isinstance(long_name, str) or not long_name.strip():
            raise InvalidArgument("long_name is required")

        self._process = process
        self._short_name = short_name
        self._long_name = long_name
        self._duration_seconds = parse_duration(duration_seconds)
        self._tweakable = parse_tweakable(tweakable)
        self._light_mode = LightMode.parse(light_mode)
        self._clock = clock

        self._lock = threading.Lock()
        self._started = False
        self._running = False
        self._engine: Optional[CountdownEngine] = None
        self._phrases = build_templates(process.name, long_name, self._duration_seconds)

    def __repr__(self) -> str:
        return (
            f"Step(short_name={self._short_name!r}, long_name={self._long_name!r}, "
            f"duration_seconds={self._duration_seconds}, tweakable={self._tweakable}, "
            f"light_mode={self._light_mode.value!r})"
        )

    @property
    def process(self) -> "Process":
        return self._process

    @property
    def short_name(self) -> str:
        return self._short_name

    @property
    def long_name(self) -> str:
        return self._long_name

    @property
    def duration_seconds(self) -> int:
        return self._duration_seconds

    @property
    def tweakable(self) -> bool:
        return self._tweakable

    @property
    def light_mode(self) -> LightMode:
        return self._light_mode

    @property
    def phrases(self) -> Dict[PhraseKey, str]:
        return dict(self._phrases)

    @property
    def state(self) -> CountdownState:
        """State of the most recent countdown (IDLE if never run)."""
        if self._engine is None:
            return CountdownState.IDLE
        return self._engine.state

    @property
    def last_remaining(self) -> Optional[int]:
        if self._engine is None:
            return None
        return self._engine.last_remaining

    def set_duration(self, seconds: int) -> None:
        """
        Change the duration of a tweakable step.

        Raises NotTweakable for fixed steps, AlreadyRunning once a countdown
        has started, InvalidArgument for non-positive values.
        """
        if not self._tweakable:
            raise NotTweakable(f"{self._long_name} has a fixed duration")
        with self._lock:
            if self._started:
                raise AlreadyRunning(f"{self._long_name} countdown has already started")
            seconds = parse_duration(seconds)
            old = self._duration_seconds
            self._duration_seconds = seconds
            self._phrases = build_templates(self._process.name, self._long_name, seconds)
        logger.info(
            "Step duration changed",
            step=self._short_name,
            old_seconds=old,
            new_seconds=seconds,
        )

    def phrase(self, key: Union[PhraseKey, str], seconds_remaining: Optional[int] = None) -> str:
        """Fully formatted message for ``key``."""
        return render_phrase(self._phrases, key, seconds_remaining=seconds_remaining)

    def run(self, on_tick: TickCallback, cancel: Optional[CancelSignal] = None) -> CountdownState:
        """Run this step's countdown; blocks until COMPLETED or ABORTED."""
        with self._lock:
            if self._running:
                raise AlreadyRunning(f"{self._long_name} is already running")
            self._running = True
            self._started = True
            self._engine = CountdownEngine(self._duration_seconds, clock=self._clock)

        try:
            return self._engine.run(on_tick, cancel)
        finally:
            with self._lock:
                self._running = False
