"""Fixed-interval pacing between page requests."""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class IntervalTicker:
    """
    Waits a fixed interval on every tick.

    One ticker paces one sequential request stream; concurrent streams each get
    their own instance. The sleep function is injectable so tests can record
    ticks without waiting.
    """

    def __init__(
        self,
        interval: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval < 0:
            raise ValueError(f"interval must be non-negative, got {interval}")
        self.interval = interval
        self._sleep = sleep
        self.ticks = 0

    async def wait(self) -> None:
        self.ticks += 1
        if self.interval > 0:
            logger.debug(f"Pausing {self.interval:.2f}s before next page (tick {self.ticks})")
            await self._sleep(self.interval)
