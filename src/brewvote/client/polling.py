"""Cancellable periodic tasks driving the dashboards."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class PollTask:
    """Runs ``tick`` every ``interval_seconds`` until stopped.

    Ticks never overlap: the next sleep starts only after the current tick
    finished. A failing tick is logged and skipped, there is no backoff.
    """

    def __init__(
        self,
        name: str,
        tick: Callable[[], Awaitable[None]],
        interval_seconds: float,
    ) -> None:
        self.name = name
        self._tick = tick
        self._interval_seconds = interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._running:
            logger.warning("Poll task %s already running", self.name)
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop(), name=self.name)

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self._tick()
            except Exception:
                logger.exception("Poll tick %s failed", self.name)
            try:
                await asyncio.sleep(self._interval_seconds)
            except asyncio.CancelledError:
                break
