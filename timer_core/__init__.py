"""
Timer core for darkroom processes.

A Process is an ordered list of Steps; each Step runs a blocking, cancellable
countdown that reports seconds remaining once per second.

The core never speaks, plays audio or drives hardware. Callers map ticks to
announcements and light changes (see announcer / control_plane).
"""

from .countdown import CancelSignal, CountdownEngine, CountdownState
from .errors import (
    AlreadyRunning,
    EmptyProcess,
    IndexOutOfRange,
    InvalidArgument,
    NotTweakable,
    TimerError,
    UnknownKey,
)
from .process import Process, StepDefinition
from .step import LightMode, PhraseKey, Step

__all__ = [
    "AlreadyRunning",
    "CancelSignal",
    "CountdownEngine",
    "CountdownState",
    "EmptyProcess",
    "IndexOutOfRange",
    "InvalidArgument",
    "LightMode",
    "NotTweakable",
    "PhraseKey",
    "Process",
    "Step",
    "StepDefinition",
    "TimerError",
    "UnknownKey",
]
