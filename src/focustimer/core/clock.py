"""Periodic clock that drives the timer's ticks."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None]]


class Ticker(Protocol):
    """Something that calls an async callback at a fixed cadence until cancelled."""

    def arm(self, callback: TickCallback) -> None: ...
    def cancel(self) -> None: ...

    @property
    def armed(self) -> bool: ...


class AsyncioTicker:
    """Runs *callback* every *interval_seconds* on the current event loop.

    ``arm()`` replaces any running clock, so there is never more than one.
    To stop the clock, call ``cancel()``; it is safe to call from inside the
    callback itself.
    """

    def __init__(self, interval_seconds: float = 1.0) -> None:
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, callback: TickCallback) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(callback), name="focustimer-clock")
        logger.debug("Clock armed interval=%.2fs", self._interval)

    def cancel(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.debug("Clock cancelled")

    async def _run(self, callback: TickCallback) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await callback()
