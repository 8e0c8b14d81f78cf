"""
Structured JSON run events.

Every event is written as one JSON line to stdout and kept in the in-memory
event store so the control API can return a run's history.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from .event_store import EventStore, event_store


class Component(str, Enum):
    """Event source components."""

    RUN_MANAGER = "run_manager"
    CONTROL_PLANE = "control_plane"


class Severity(str, Enum):
    """Event severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class EventEmitter:
    """Emits structured JSON run events."""

    def __init__(self, component: Component, store: Optional[EventStore] = None):
        self.component = component
        self.store = store if store is not None else event_store

    def emit(
        self,
        event_type: str,
        run_id: str,
        severity: Severity = Severity.INFO,
        correlation_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        event = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "run_id": run_id,
            "component": self.component.value,
            "event_type": event_type,
            "severity": severity.value,
            "correlation_id": correlation_id or run_id,
        }
        event.update(kwargs)

        sys.stdout.write(json.dumps(event, ensure_ascii=False, default=str))
        sys.stdout.write("\n")
        sys.stdout.flush()

        self.store.store(event)

    def run_started(self, run_id: str, process_name: str, total_seconds: int, step_count: int) -> None:
        """Emit run.started event."""
        self.emit(
            "run.started",
            run_id,
            process_name=process_name,
            total_seconds=total_seconds,
            step_count=step_count,
        )

    def step_started(
        self,
        run_id: str,
        step_index: int,
        short_name: str,
        duration_seconds: int,
        light_mode: str,
    ) -> None:
        """Emit step.started event."""
        self.emit(
            "step.started",
            run_id,
            step_index=step_index,
            short_name=short_name,
            duration_seconds=duration_seconds,
            light_mode=light_mode,
        )

    def step_finished(self, run_id: str, step_index: int, short_name: str, state: str) -> None:
        """Emit step.completed or step.aborted event."""
        self.emit(
            f"step.{state}",
            run_id,
            step_index=step_index,
            short_name=short_name,
        )

    def run_finished(self, run_id: str, process_name: str, state: str, detail: Optional[str] = None) -> None:
        """Emit run.completed, run.aborted or run.failed event."""
        self.emit(
            f"run.{state}",
            run_id,
            severity=Severity.ERROR if state == "failed" else Severity.INFO,
            process_name=process_name,
            detail=detail,
        )
