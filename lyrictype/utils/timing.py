"""
Polling and debounce utilities.

Every helper takes its delay and attempt count as parameters plus an
injectable ``sleep`` coroutine function, so tests can drive them with a
fake scheduler instead of real timers.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

SleepFunc = Callable[[float], Awaitable[Any]]


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    predicate: Callable[[T], bool],
    attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    sleep: Optional[SleepFunc] = None
) -> Optional[T]:
    """
    Call ``fetch`` until ``predicate`` accepts its result

    Failed fetches count as attempts. Gives up quietly after ``attempts``
    tries so the caller can proceed without the data.

    Returns:
        The first accepted result, or None
    """
    do_sleep = sleep or asyncio.sleep
    current_delay = delay

    for attempt in range(1, attempts + 1):
        try:
            result = await fetch()
            if predicate(result):
                return result
        except Exception as e:
            logger.debug(f"Poll attempt {attempt}/{attempts} failed: {e}")

        if attempt < attempts:
            await do_sleep(current_delay)
            current_delay *= backoff

    return None


class Debouncer:
    """
    Collapses bursts of calls into the last one

    Each call waits ``delay`` seconds; if another call arrived meanwhile the
    earlier one returns None without invoking its target.

    Example:
        debouncer = Debouncer(0.3)
        results = await debouncer.call(api.search_artists, "beat", 10)
    """

    def __init__(self, delay: float, sleep: Optional[SleepFunc] = None) -> None:
        self.delay = delay
        self._sleep = sleep or asyncio.sleep
        self._generation = 0

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> Optional[T]:
        self._generation += 1
        my_generation = self._generation

        await self._sleep(self.delay)

        if my_generation != self._generation:
            return None
        return await func(*args, **kwargs)

    def cancel(self) -> None:
        """Supersede any call still waiting"""
        self._generation += 1
