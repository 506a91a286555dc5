"""Exponential backoff for provider calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from .exceptions import TransientError

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """``max_attempts`` counts the first call, so 4 attempts means 3 retries."""

    max_attempts: int = 3
    base_delay: float = 2.0
    multiplier: float = 2.0
    max_delay: float = 30.0
    retryable_exceptions: tuple[type[Exception], ...] = field(
        default_factory=lambda: (TransientError,)
    )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the zero-based ``attempt`` failed."""
        return min(self.base_delay * self.multiplier**attempt, self.max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
    on_retry: Callable[[Exception, int], None] | None = None,
) -> T:
    """Await ``operation`` until it succeeds, retrying only retryable exceptions.

    The last failure is re-raised unchanged once ``max_attempts`` is used up.
    """
    config = config or RetryConfig()
    attempt = 0

    while True:
        try:
            return await operation()
        except config.retryable_exceptions as e:
            if attempt + 1 >= config.max_attempts:
                logger.error(
                    "%s gave up after %d attempts: %s", operation_name, attempt + 1, e
                )
                raise

            delay = config.delay_for(attempt)
            logger.warning(
                "%s attempt %d/%d failed, retrying in %.1fs: %s",
                operation_name,
                attempt + 1,
                config.max_attempts,
                delay,
                e,
            )
            if on_retry is not None:
                on_retry(e, attempt)

            await asyncio.sleep(delay)
            attempt += 1
