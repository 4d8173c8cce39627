"""
Timer scheduling for the engagement tracker.

The tracker only needs one-shot timers it can cancel; repeating timers are
built by re-arming from the callback.
"""

import asyncio
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Single-threaded cooperative scheduler."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler:
    """Schedule timers on an asyncio event loop (the running loop by default)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(delay, callback)
