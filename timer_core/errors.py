"""
Timer core error taxonomy.

All errors are local and synchronous. They surface immediately to the caller
and are never retried inside the core. An aborted countdown is a result
(CountdownState.ABORTED), not an error.
"""


class TimerError(Exception):
    """Base class for timer core errors."""


class InvalidArgument(TimerError, ValueError):
    """Bad construction or mutation parameter."""


class NotTweakable(TimerError):
    """Duration change requested on a fixed-duration step."""


class AlreadyRunning(TimerError):
    """Step countdown has already started."""


class IndexOutOfRange(TimerError, IndexError):
    """Step lookup outside [0, len(steps))."""


class EmptyProcess(TimerError, ValueError):
    """Process created without any steps."""


class UnknownKey(TimerError, KeyError):
    """Phrase key not in the known set."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""
