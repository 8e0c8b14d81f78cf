"""
Phrase templates for step announcements.

Templates are pure functions of the process name, the step's long name and
its duration, so they can be tested without running a countdown.
"""

from enum import Enum
from typing import Dict, Optional, Union

from .durations import seconds_to_words
from .errors import InvalidArgument, UnknownKey


class PhraseKey(str, Enum):
    """Moments at which a step has something to say."""
    READY_TO_START = "ready_to_start"
    TIME_LEFT = "time_left"
    LIGHT_SAFE = "light_safe"
    ABORTED = "aborted"
    COMPLETE = "complete"


# camelCase aliases accepted from callers that use the original key spelling
_ALIASES = {
    "readyToStart": PhraseKey.READY_TO_START,
    "timeLeft": PhraseKey.TIME_LEFT,
    "lightSafe": PhraseKey.LIGHT_SAFE,
}


def parse_key(key: Union[PhraseKey, str]) -> PhraseKey:
    """Resolve a PhraseKey from an enum member or its string spelling."""
    if isinstance(key, PhraseKey):
        return key
    if isinstance(key, str):
        key = key.lstrip(":")
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return PhraseKey(key)
        except ValueError:
            pass
    raise UnknownKey(f"Unknown phrase key: {key!r}")


def build_templates(process_name: str, long_name: str, duration_seconds: int) -> Dict[PhraseKey, str]:
    """
    Build the template set for one step.

    TIME_LEFT keeps a "%s" placeholder for the remaining-time words; every
    other template is final once the duration is fixed.
    """
    step_name = long_name.lower()
    return {
        PhraseKey.READY_TO_START: (
            f"Ready to start {process_name} {step_name} for {seconds_to_words(duration_seconds)}."
        ),
        PhraseKey.TIME_LEFT: "%s left",
        PhraseKey.LIGHT_SAFE: "Paper is now light safe.",
        PhraseKey.ABORTED: f"{step_name} aborted.",
        PhraseKey.COMPLETE: f"{process_name} {step_name} complete.",
    }


def render_phrase(
    templates: Dict[PhraseKey, str],
    key: Union[PhraseKey, str],
    seconds_remaining: Optional[int] = None,
) -> str:
    """Format the phrase for ``key`` from a template set."""
    phrase_key = parse_key(key)
    template = templates[phrase_key]
    if phrase_key is PhraseKey.TIME_LEFT:
        if seconds_remaining is None:
            raise InvalidArgument("time_left phrase requires seconds_remaining")
        return template % seconds_to_words(seconds_remaining)
    return template
