"""
Configuration for the timer control plane.

Loads from environment variables (optionally seeded from .env_local) with
sensible defaults.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_PRESETS_PATH = Path(__file__).parent / "data" / "default_presets.yaml"


def _parse_int_env(key: str, default: int) -> int:
    """
    Parse a positive integer environment variable, stripping comments and
    whitespace. Unparsable, zero or negative values fall back to the default.

    Handles cases like:
    - "30  # comment" -> 30
    - "30" -> 30
    - None -> default
    - "0" -> default
    """
    value = os.environ.get(key)
    if not value:
        return default

    if "#" in value:
        value = value.split("#")[0]
    value = value.strip()

    if not value:
        return default

    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class TimerConfig:
    """Control plane configuration."""

    presets_path: Path = DEFAULT_PRESETS_PATH

    # Narration marks
    announce_interval_seconds: int = 30
    final_interval_seconds: int = 10
    final_countdown_seconds: int = 5

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "TimerConfig":
        """Load configuration from environment variables."""
        env_file = env_file or Path(__file__).parent.parent / ".env_local"
        if env_file.exists():
            load_dotenv(env_file)

        presets = os.environ.get("TIMER_PRESETS_PATH")
        return cls(
            presets_path=Path(presets) if presets else DEFAULT_PRESETS_PATH,
            announce_interval_seconds=_parse_int_env("TIMER_ANNOUNCE_INTERVAL_SECONDS", default=30),
            final_interval_seconds=_parse_int_env("TIMER_FINAL_INTERVAL_SECONDS", default=10),
            final_countdown_seconds=_parse_int_env("TIMER_FINAL_COUNTDOWN_SECONDS", default=5),
            log_level=os.environ.get("TIMER_LOG_LEVEL", "INFO").upper(),
            log_json=_parse_bool_env("TIMER_LOG_JSON", default=True),
            host=os.environ.get("TIMER_HOST", "0.0.0.0"),
            port=_parse_int_env("TIMER_PORT", default=8000),
        )


def get_config() -> TimerConfig:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = TimerConfig.from_env()
    return _config


# Global config instance (lazy loaded)
_config: Optional[TimerConfig] = None
