"""
HTTP server for the timer control plane.
"""
from fastapi import FastAPI

from logging_setup import get_logger, Component
from observability.event_store import event_store
from .control_api import router as control_router

app = FastAPI(title="Darkroom Timer Control Plane")
logger = get_logger(Component.SERVER)
app.include_router(control_router)


@app.get("/health")
async def health():
    """Health check endpoint with event store statistics."""
    logger.debug("Health check")
    return {
        "status": "ok",
        "component": "control_plane",
        "events": event_store.get_stats(),
    }
