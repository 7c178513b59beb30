"""Metrics calculator for aggregating fetch events."""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from src.utils.event_store import Event, EventStore


@dataclass
class FetchMetrics:
    """Fetch counters for one component (or all of them)."""

    total_fetch_attempts: int = 0
    successful_fetches: int = 0
    failed_fetches: int = 0
    discarded_responses: int = 0
    success_rate: float = 0.0
    average_fetch_duration_ms: float = 0.0


@dataclass
class Metrics:
    """Represents aggregated dashboard metrics."""

    overall: FetchMetrics
    by_component: dict[str, FetchMetrics]
    uptime_seconds: int

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            "overall": asdict(self.overall),
            "by_component": {name: asdict(m) for name, m in self.by_component.items()},
            "uptime_seconds": self.uptime_seconds,
        }


def _summarize(events: list[Event]) -> FetchMetrics:
    completes = [e for e in events if e.event_type == "fetch_complete"]
    successful = len([e for e in completes if e.context.get("status") == "success"])
    failed = len([e for e in completes if e.context.get("status") == "failed"])
    discarded = len([e for e in events if e.event_type == "fetch_discarded"])

    durations = [e.duration_ms for e in completes if e.duration_ms is not None]

    return FetchMetrics(
        total_fetch_attempts=len(completes),
        successful_fetches=successful,
        failed_fetches=failed,
        discarded_responses=discarded,
        success_rate=(successful / len(completes) * 100) if completes else 0.0,
        average_fetch_duration_ms=(sum(durations) / len(durations)) if durations else 0.0,
    )


class MetricsCalculator:
    """Calculates metrics from event store data."""

    def __init__(self, event_store: EventStore, start_time: Optional[datetime] = None):
        """
        Initialize the metrics calculator.

        Args:
            event_store: The event store to calculate metrics from
            start_time: Optional start time for uptime calculation (defaults to now)
        """
        self.event_store = event_store
        self.start_time = start_time or datetime.now(timezone.utc)

    def calculate(self) -> Metrics:
        events = self.event_store.get_all_events()

        by_component: dict[str, list[Event]] = {}
        for event in events:
            by_component.setdefault(event.component, []).append(event)

        uptime_seconds = int((datetime.now(timezone.utc) - self.start_time).total_seconds())

        return Metrics(
            overall=_summarize(events),
            by_component={name: _summarize(evts) for name, evts in by_component.items()},
            uptime_seconds=uptime_seconds,
        )
