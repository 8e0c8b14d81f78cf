"""
Human-readable duration words for announcements.

Example: 135 -> "2 minutes 15 seconds"
"""

from .errors import InvalidArgument


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def seconds_to_words(seconds: int) -> str:
    """
    Render a number of seconds as minutes and seconds words.

    Zero parts are left out, except that 0 renders as "0 seconds".
    """
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        raise InvalidArgument(f"seconds must be an integer, got {seconds!r}")
    if seconds < 0:
        raise InvalidArgument(f"seconds must not be negative, got {seconds}")

    minutes, secs = divmod(seconds, 60)
    parts = []
    if minutes:
        parts.append(_plural(minutes, "minute"))
    if secs or not minutes:
        parts.append(_plural(secs, "second"))
    return " ".join(parts)
