"""Per-booking logging context.

Fields set here are copied onto every log record by ContextFilter. The
context lives in a ContextVar so that it follows a quote into the tasks
started by the async price loaders, and nested blocks restore the enclosing
fields on exit instead of wiping them.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_context: ContextVar[dict[str, Any]] = ContextVar("care_pricing_log_context", default={})


class LogContext:
    """Read access to the fields active in the current context."""

    @staticmethod
    def get() -> dict[str, Any]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set({})


class ContextFilter(logging.Filter):
    """Injects LogContext fields into log records.

    Fields passed explicitly through ``extra=`` take precedence.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Add fields to log records emitted inside the block.

    Fields are injected via ContextFilter, which must be attached to the
    handler (see setup_logging).
    """
    token = _context.set({**_context.get(), **kwargs})
    try:
        yield
    finally:
        _context.reset(token)


@contextmanager
def log_booking_context(session_id: str, **kwargs: Any) -> Iterator[None]:
    """Tag every record with the booking session being quoted.

    The session id doubles as the correlation id unless one is given.
    """
    kwargs.setdefault("correlation_id", session_id)
    with log_context(session_id=session_id, **kwargs):
        yield
