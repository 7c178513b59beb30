"""Structured logging module with JSON output support."""

import json
import sys
import traceback
from datetime import UTC, datetime
from typing import Any

from src.utils.trace_context import get_current_trace

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StructuredLogger:
    """Logger that writes one JSON object per line to stdout."""

    def __init__(self, component: str, stream=None):
        """
        Initialize the structured logger.

        Args:
            component: Name of the component using this logger
            stream: Optional text stream (defaults to sys.stdout at write time)
        """
        self.component = component
        self.stream = stream

    def _format_log_entry(
        self,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level,
            "component": self.component,
            "message": message,
        }

        trace_id = get_current_trace()
        if trace_id or context:
            entry["context"] = dict(context or {})
            if trace_id:
                entry["context"].setdefault("trace_id", trace_id)

        if exception is not None:
            entry["exception"] = {
                "type": type(exception).__name__,
                "message": str(exception),
                "stack_trace": "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                ),
            }

        return json.dumps(entry, default=str)

    def _write_log(self, log_entry: str) -> None:
        try:
            print(log_entry, file=self.stream or sys.stdout)
        except Exception as e:
            print(f"Failed to write log: {e}", file=sys.stderr)

    def debug(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log a debug message."""
        self._write_log(self._format_log_entry("DEBUG", message, context))

    def info(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log an info message."""
        self._write_log(self._format_log_entry("INFO", message, context))

    def warning(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Log a warning message."""
        self._write_log(self._format_log_entry("WARNING", message, context))

    def error(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> None:
        """Log an error message with optional exception details."""
        self._write_log(self._format_log_entry("ERROR", message, context, exception))

    def log(
        self,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> None:
        """
        Log a message with specified level.

        Unknown levels are written as INFO.
        """
        level = level.upper()
        if level not in LEVELS:
            level = "INFO"
        self._write_log(self._format_log_entry(level, message, context, exception))
