"""
Async Utility Functions

Async utility functions for rate limiting and task management
used by the judge client and the confirmation sweep.
"""

import asyncio
import time
from typing import Any, Coroutine, Iterable, List

from .logging import get_logger

logger = get_logger(__name__)


class AsyncThrottler:
    """Async throttler for rate limiting requests."""

    def __init__(self, rate_limit: int, time_window: float = 60.0):
        """
        Initialize throttler.

        Args:
            rate_limit: Maximum number of requests per time window
            time_window: Time window in seconds (default: 60s)
        """
        self.rate_limit = rate_limit
        self.time_window = time_window
        self.requests: List[float] = []
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Acquire permission to make a request."""
        if self.rate_limit <= 0:
            return

        async with self._lock:
            while True:
                current_time = time.monotonic()

                # Remove old requests outside the time window
                cutoff_time = current_time - self.time_window
                self.requests = [t for t in self.requests if t > cutoff_time]

                if len(self.requests) < self.rate_limit:
                    self.requests.append(current_time)
                    return

                sleep_time = self.time_window - (current_time - self.requests[0])
                logger.debug(f"Rate limit reached, sleeping for {sleep_time:.2f}s")
                await asyncio.sleep(max(sleep_time, 0.0))


def create_task_with_name(coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
    """
    Create a named task for better debugging.

    Args:
        coro: Coroutine to execute
        name: Task name

    Returns:
        Named asyncio Task
    """
    return asyncio.create_task(coro, name=name)


async def cancel_tasks(tasks: Iterable[asyncio.Task]) -> None:
    """
    Cancel a list of tasks gracefully.

    Args:
        tasks: Tasks to cancel
    """
    tasks = [task for task in tasks if not task.done()]
    if not tasks:
        return

    for task in tasks:
        task.cancel()

    # Wait for them to finish cancellation
    await asyncio.gather(*tasks, return_exceptions=True)
