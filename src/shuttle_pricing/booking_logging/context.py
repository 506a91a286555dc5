"""Task-local logging context for adding fields to log records."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)


class LogContext:
    """Context-variable storage for log context fields.

    Each asyncio task sees its own copy, so concurrent recalculations do not
    overwrite each other's fields.
    """

    @classmethod
    def set(cls, **kwargs: Any) -> None:
        ctx = dict(_log_context.get() or {})
        ctx.update(kwargs)
        _log_context.set(ctx)

    @classmethod
    def get(cls) -> dict[str, Any]:
        return dict(_log_context.get() or {})

    @classmethod
    def clear(cls) -> None:
        _log_context.set(None)


class ContextFilter(logging.Filter):
    """Injects LogContext fields into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in LogContext.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Context manager that sets logging context fields.

    Fields are injected into log records via ContextFilter, which must
    be attached to the handler (see setup_logging). Previous fields are
    restored on exit.
    """
    token = _log_context.set({**(_log_context.get() or {}), **kwargs})
    try:
        yield
    finally:
        _log_context.reset(token)


@contextmanager
def log_quote_context(route_key: str, **kwargs: Any) -> Iterator[None]:
    """Convenience context manager for a price recalculation."""
    correlation_id = kwargs.pop("correlation_id", route_key)
    with log_context(route_key=route_key, correlation_id=correlation_id, **kwargs):
        yield
