"""In-memory record of fetch operations for the debug endpoints."""

import uuid
from collections import deque
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass
class Event:
    """A single fetch lifecycle event."""

    id: str
    timestamp: str
    trace_id: str
    event_type: str
    component: str
    message: str
    context: dict[str, Any]
    duration_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


class EventStore:
    """Bounded event buffer; the oldest events fall off once max_size is reached."""

    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self._events: deque[Event] = deque(maxlen=max_size)

    def add_event(
        self,
        trace_id: str,
        event_type: str,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> Event:
        """
        Add an event to the store.

        Args:
            trace_id: Trace ID of the fetch cycle
            event_type: "fetch_start", "fetch_complete" or "fetch_discarded"
            component: Fetcher that generated the event
            message: Event message
            context: Optional context fields
            duration_ms: Optional duration in milliseconds

        Returns:
            The created Event object
        """
        event = Event(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            trace_id=trace_id,
            event_type=event_type,
            component=component,
            message=message,
            context=context or {},
            duration_ms=duration_ms,
        )
        self._events.append(event)
        return event

    def get_recent_events(self, limit: int = 100) -> list[Event]:
        """Return up to `limit` most recent events, oldest first."""
        return list(self._events)[-limit:] if limit > 0 else []

    def get_events_by_trace(self, trace_id: str) -> list[Event]:
        return [event for event in self._events if event.trace_id == trace_id]

    def get_events_by_type(self, event_type: str, limit: int = 100) -> list[Event]:
        matching = [event for event in self._events if event.event_type == event_type]
        return matching[-limit:] if limit > 0 else []

    def get_all_events(self) -> list[Event]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()

    def size(self) -> int:
        return len(self._events)
