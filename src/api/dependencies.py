"""FastAPI dependencies for the dashboard routes."""

from fastapi import Request

from src.services.dashboard_session import DashboardSession
from src.utils.event_store import EventStore
from src.utils.metrics import MetricsCalculator


def get_session(request: Request) -> DashboardSession:
    """The dashboard session created in the application lifespan."""
    return request.app.state.session


def get_event_store(request: Request) -> EventStore:
    return request.app.state.event_store


def get_metrics_calculator(request: Request) -> MetricsCalculator:
    return request.app.state.metrics_calculator
