"""
Logging helpers for request-scoped correlation.

Overview
--------
- Exposes a `contextvars.ContextVar` (`request_id_var`) that stores the current
  request id for the lifetime of the request (set by middleware).
- Provides `RequestIDFilter`, a `logging.Filter` that injects `request_id` onto
  every `LogRecord` so formatters using `%(request_id)s` never break, even when
  the log line originates outside an HTTP request (management commands, the
  import worker, app startup).
"""

from __future__ import annotations

import logging
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIDFilter(logging.Filter):
    """Ensures `%(request_id)s` is always present in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True
