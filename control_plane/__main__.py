"""
Entry point for running the timer control plane.

Usage:
    python -m control_plane

Starts the FastAPI server on TIMER_HOST:TIMER_PORT (default 0.0.0.0:8000).
"""
import uvicorn

from logging_setup import setup_logging
from .config import get_config

if __name__ == "__main__":
    config = get_config()
    setup_logging(level=config.log_level, use_json=config.log_json)

    uvicorn.run(
        "control_plane.server:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
