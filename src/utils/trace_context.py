"""Trace ids for following one fetch cycle through the logs."""

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

_trace_id_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "trace_id", default=None
)


def get_current_trace() -> str | None:
    """Return the trace id of the running fetch, if any."""
    return _trace_id_context.get()


@contextmanager
def fetch_trace(trace_id: str | None = None) -> Iterator[str]:
    """
    Run a block under a trace id.

    Every asyncio task has its own context copy, so concurrent fetches never
    see each other's id. The previous value is restored on exit.

    Args:
        trace_id: Explicit id to use; a new UUID4 is generated when omitted

    Yields:
        The active trace id
    """
    trace_id = trace_id or str(uuid.uuid4())
    token = _trace_id_context.set(trace_id)
    try:
        yield trace_id
    finally:
        _trace_id_context.reset(token)
