"""
Shared Ticker

One periodic asyncio task per owner, fanned out to any number of
subscribers. The task starts with the first subscriber and is cancelled
when the last one unsubscribes, so the tick never fires more than once per
interval however many views are mounted.
"""
from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

from strokecode.utils import get_logger

logger = get_logger(__name__)

TickCallback = Callable[[], None]


class SharedTicker:
    def __init__(self, interval_seconds: float = 30.0):
        self.interval_seconds = interval_seconds
        self._subscribers: List[TickCallback] = []
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: TickCallback) -> Callable[[], None]:
        """Register ``callback``; returns the matching unsubscribe function."""
        self._subscribers.append(callback)
        self._ensure_running()

        def unsubscribe() -> None:
            self.unsubscribe(callback)

        return unsubscribe

    def unsubscribe(self, callback: TickCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)
        if not self._subscribers:
            self._cancel()

    def fire(self) -> None:
        """Deliver one tick to every subscriber. A failing subscriber does not stop the others."""
        self.ticks += 1
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception as e:
                logger.warning(f"SharedTicker: subscriber failed: {e}")

    def close(self) -> None:
        self._subscribers.clear()
        self._cancel()

    # ------------------------------------------------------------------

    def _ensure_running(self) -> None:
        if self.running:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller): ticks are delivered through fire()
            return
        self._task = loop.create_task(self._run())
        logger.debug(f"SharedTicker started ({self.interval_seconds}s)")

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug("SharedTicker stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.fire()
