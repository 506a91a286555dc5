import asyncio
import logging

import pytest

from shuttle_pricing.booking_logging import (
    ContextFilter,
    LogContext,
    log_context,
    log_quote_context,
)


@pytest.fixture(autouse=True)
def clear_context():
    LogContext.clear()
    yield
    LogContext.clear()


def _record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, "test.py", 1, "msg", (), None)


@pytest.mark.unit
class TestLogContext:
    def test_context_manager_restores_previous_fields(self):
        LogContext.set(quote_id="q-1")

        with log_context(stage="route"):
            assert LogContext.get() == {"quote_id": "q-1", "stage": "route"}

        assert LogContext.get() == {"quote_id": "q-1"}

    def test_quote_context_uses_route_key_as_correlation(self):
        with log_quote_context("route:A:B"):
            fields = LogContext.get()

        assert fields == {"route_key": "route:A:B", "correlation_id": "route:A:B"}

    def test_filter_injects_fields(self):
        record = _record()

        with log_quote_context("route:A:B", correlation_id="req-7"):
            ContextFilter().filter(record)

        assert record.route_key == "route:A:B"
        assert record.correlation_id == "req-7"

    async def test_tasks_do_not_share_fields(self):
        seen = {}

        async def worker(key: str):
            with log_quote_context(key):
                await asyncio.sleep(0)
                seen[key] = LogContext.get()["route_key"]

        await asyncio.gather(worker("route:A:B"), worker("route:C:D"))

        assert seen == {"route:A:B": "route:A:B", "route:C:D": "route:C:D"}
