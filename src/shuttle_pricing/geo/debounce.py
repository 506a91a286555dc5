"""Keyed debounce scheduler: only the last change in a burst triggers work."""

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class DebounceScheduler:
    """Coalesces bursts of calls per key into one call after a quiet period.

    ``schedule`` cancels any timer already armed for the same key and arms a
    new one, so a burst of changes within ``delay`` seconds runs ``fn`` once,
    with the arguments of the last change. Coroutine functions are run as
    tasks on the running loop; the scheduler keeps a reference until they finish.
    """

    def __init__(self) -> None:
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    def schedule(self, key: str, delay: float, fn: Callable[..., Any], *args: Any) -> None:
        loop = asyncio.get_running_loop()
        self.cancel(key)
        self._timers[key] = loop.call_later(delay, self._fire, key, fn, args)

    def _fire(self, key: str, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self._timers.pop(key, None)
        if inspect.iscoroutinefunction(fn):
            task = asyncio.get_running_loop().create_task(fn(*args))
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)
            return
        try:
            fn(*args)
        except Exception:
            logger.exception("Debounced call for %s failed", key)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced task failed", exc_info=task.exception())

    def cancel(self, key: str) -> bool:
        timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    def is_pending(self, key: str) -> bool:
        return key in self._timers

    async def drain(self) -> None:
        """Wait for tasks started by fired timers."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
