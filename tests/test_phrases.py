"""
Tests for duration words and phrase templates.
"""
import pytest

from timer_core import InvalidArgument, PhraseKey, UnknownKey
from timer_core.durations import seconds_to_words
from timer_core.phrases import build_templates, parse_key, render_phrase


@pytest.mark.parametrize("seconds,words", [
    (0, "0 seconds"),
    (1, "1 second"),
    (45, "45 seconds"),
    (60, "1 minute"),
    (61, "1 minute 1 second"),
    (120, "2 minutes"),
    (135, "2 minutes 15 seconds"),
    (3600, "60 minutes"),
])
def test_seconds_to_words(seconds, words):
    assert seconds_to_words(seconds) == words


@pytest.mark.parametrize("value", [-1, 1.5, "10", True])
def test_seconds_to_words_rejects_bad_input(value):
    with pytest.raises(InvalidArgument):
        seconds_to_words(value)


def test_templates_are_pure():
    first = build_templates("RA-4", "Bleach Fix", 45)
    second = build_templates("RA-4", "Bleach Fix", 45)

    assert first == second
    assert first[PhraseKey.READY_TO_START] == "Ready to start RA-4 bleach fix for 45 seconds."
    assert first[PhraseKey.COMPLETE] == "RA-4 bleach fix complete."
    assert first[PhraseKey.ABORTED] == "bleach fix aborted."


def test_render_time_left():
    templates = build_templates("B&W", "Wash", 600)
    assert render_phrase(templates, PhraseKey.TIME_LEFT, seconds_remaining=90) == "1 minute 30 seconds left"


def test_render_ignores_seconds_for_static_keys():
    templates = build_templates("B&W", "Wash", 600)
    assert render_phrase(templates, "complete", seconds_remaining=5) == "B&W wash complete."


def test_parse_key_aliases():
    assert parse_key("readyToStart") is PhraseKey.READY_TO_START
    assert parse_key("ready_to_start") is PhraseKey.READY_TO_START
    assert parse_key(":lightSafe") is PhraseKey.LIGHT_SAFE
    assert parse_key(PhraseKey.ABORTED) is PhraseKey.ABORTED


def test_parse_key_unknown():
    with pytest.raises(UnknownKey, match="Unknown phrase key"):
        parse_key("finished")


def test_render_time_left_negative_rejected():
    templates = build_templates("B&W", "Wash", 600)
    with pytest.raises(InvalidArgument):
        render_phrase(templates, PhraseKey.TIME_LEFT, seconds_remaining=-1)
