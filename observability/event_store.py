"""
Run event store for querying events by run_id.

In-memory implementation; runs are not persisted across restarts.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from dataclasses import dataclass


_ENVELOPE = ("ts", "run_id", "component", "event_type", "severity", "correlation_id")


@dataclass
class StoredEvent:
    """A run event stored in memory."""

    ts: datetime
    run_id: str
    component: str
    event_type: str
    severity: str
    correlation_id: str
    payload: Dict[str, Any]  # All other event fields

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the event envelope dict."""
        result = {
            "ts": self.ts.isoformat(),
            "run_id": self.run_id,
            "component": self.component,
            "event_type": self.event_type,
            "severity": self.severity,
            "correlation_id": self.correlation_id,
        }
        result.update(self.payload)
        return result


class EventStore:
    """
    In-memory event store.

    Events live in a bounded deque (FIFO); the oldest are dropped once
    ``max_events`` is reached.
    """

    def __init__(self, max_events: int = 10000):
        self._events: deque[StoredEvent] = deque(maxlen=max_events)
        self._max_events = max_events

    def store(self, event: Dict[str, Any]) -> None:
        """Store one event envelope dict."""
        ts_str = event.get("ts")
        if isinstance(ts_str, str):
            ts = datetime.fromisoformat(ts_str.replace("Z", "+00:00"))
        else:
            ts = datetime.now(timezone.utc)

        run_id = event.get("run_id", "")
        stored = StoredEvent(
            ts=ts,
            run_id=run_id,
            component=event.get("component", "unknown"),
            event_type=event.get("event_type", "unknown"),
            severity=event.get("severity", "info"),
            correlation_id=event.get("correlation_id", run_id),
            payload={k: v for k, v in event.items() if k not in _ENVELOPE},
        )
        self._events.append(stored)

    def query(
        self,
        run_id: Optional[str] = None,
        event_type: Optional[str] = None,
        component: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Query events with optional filters.

        Returns event dicts in insertion order (oldest first).
        """
        results: List[StoredEvent] = []

        for event in list(self._events):
            if run_id and event.run_id != run_id:
                continue
            if event_type and event.event_type != event_type:
                continue
            if component and event.component != component:
                continue

            results.append(event)

            if limit and len(results) >= limit:
                break

        return [e.to_dict() for e in results]

    def clear(self) -> None:
        self._events.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics."""
        return {
            "total_events": len(self._events),
            "max_events": self._max_events,
            "oldest_event_ts": self._events[0].ts.isoformat() if self._events else None,
            "newest_event_ts": self._events[-1].ts.isoformat() if self._events else None,
        }


# Global event store instance
event_store = EventStore()
