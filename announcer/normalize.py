"""
Text normalization before speech.

Darkroom jargon reads badly through a speech engine; expand it first.

Example: "B&W print developer complete." -> "Black and White print developer complete."
"""

import re

_REPLACEMENTS = (
    (re.compile(r"B&W"), "Black and White"),
    (re.compile(r"RA-4"), "R Eh 4"),
)


def munge(text: str) -> str:
    """Expand abbreviations the speech engine would mispronounce."""
    for pattern, replacement in _REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text
