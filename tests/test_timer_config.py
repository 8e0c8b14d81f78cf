"""
Tests for control plane configuration.

Verifies:
- Configuration loading from environment
- Default values
- Comment stripping in integer values
"""
import os
from pathlib import Path

from control_plane.config import DEFAULT_PRESETS_PATH, TimerConfig


ENV_KEYS = [
    "TIMER_PRESETS_PATH",
    "TIMER_ANNOUNCE_INTERVAL_SECONDS",
    "TIMER_FINAL_INTERVAL_SECONDS",
    "TIMER_FINAL_COUNTDOWN_SECONDS",
    "TIMER_LOG_LEVEL",
    "TIMER_LOG_JSON",
    "TIMER_HOST",
    "TIMER_PORT",
]


def _clear_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_config_defaults(monkeypatch, tmp_path):
    _clear_env(monkeypatch)

    config = TimerConfig.from_env(env_file=tmp_path / "missing.env")

    assert config.presets_path == DEFAULT_PRESETS_PATH
    assert config.announce_interval_seconds == 30
    assert config.final_interval_seconds == 10
    assert config.final_countdown_seconds == 5
    assert config.log_level == "INFO"
    assert config.log_json is True
    assert config.host == "0.0.0.0"
    assert config.port == 8000


def test_config_from_env_all_fields(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.setenv("TIMER_PRESETS_PATH", "/srv/darkroom/presets.yaml")
    monkeypatch.setenv("TIMER_ANNOUNCE_INTERVAL_SECONDS", "60")
    monkeypatch.setenv("TIMER_FINAL_INTERVAL_SECONDS", "15")
    monkeypatch.setenv("TIMER_FINAL_COUNTDOWN_SECONDS", "3")
    monkeypatch.setenv("TIMER_LOG_LEVEL", "debug")
    monkeypatch.setenv("TIMER_LOG_JSON", "false")
    monkeypatch.setenv("TIMER_HOST", "127.0.0.1")
    monkeypatch.setenv("TIMER_PORT", "9000")

    config = TimerConfig.from_env(env_file=tmp_path / "missing.env")

    assert config.presets_path == Path("/srv/darkroom/presets.yaml")
    assert config.announce_interval_seconds == 60
    assert config.final_interval_seconds == 15
    assert config.final_countdown_seconds == 3
    assert config.log_level == "DEBUG"
    assert config.log_json is False
    assert config.host == "127.0.0.1"
    assert config.port == 9000


def test_int_env_strips_comments(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.setenv("TIMER_ANNOUNCE_INTERVAL_SECONDS", "20  # every twenty seconds")
    monkeypatch.setenv("TIMER_PORT", "not-a-port")

    config = TimerConfig.from_env(env_file=tmp_path / "missing.env")

    assert config.announce_interval_seconds == 20
    assert config.port == 8000


def test_env_file_is_loaded(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    env_file = tmp_path / ".env_local"
    env_file.write_text("TIMER_PORT=8123\nTIMER_HOST='10.0.0.5'\n", encoding="utf-8")

    try:
        config = TimerConfig.from_env(env_file=env_file)
    finally:
        # load_dotenv writes os.environ directly
        for key in ("TIMER_PORT", "TIMER_HOST"):
            os.environ.pop(key, None)

    assert config.port == 8123
    assert config.host == "10.0.0.5"


def test_non_positive_int_env_uses_default(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.setenv("TIMER_ANNOUNCE_INTERVAL_SECONDS", "0")
    monkeypatch.setenv("TIMER_FINAL_INTERVAL_SECONDS", "-10")
    monkeypatch.setenv("TIMER_FINAL_COUNTDOWN_SECONDS", "0  # silent")
    monkeypatch.setenv("TIMER_PORT", "-1")

    config = TimerConfig.from_env(env_file=tmp_path / "missing.env")

    assert config.announce_interval_seconds == 30
    assert config.final_interval_seconds == 10
    assert config.final_countdown_seconds == 5
    assert config.port == 8000
