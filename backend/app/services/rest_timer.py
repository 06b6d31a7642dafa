"""
Rest Timer
==========
Periodic asyncio callback that drives the rest countdown of an active
workout. The task only exists while the user is resting: it is created
when a rest begins and cancelled as soon as resting ends, so nothing
keeps ticking after a session is finished or abandoned.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RestTimer:
    """Calls ``on_tick`` every ``interval`` seconds until cancelled.

    ``on_tick`` returns False to stop the loop from the inside (the
    countdown reached zero).
    """

    def __init__(self, on_tick: Callable[[], bool], interval: float = 1.0) -> None:
        self._on_tick = on_tick
        self._interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start (or restart) the countdown loop on the running event loop."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        # The loop stops itself when on_tick returns False
        if task is asyncio.current_task():
            return
        task.cancel()

    async def _run(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._interval)
                if not self._on_tick():
                    break
        except asyncio.CancelledError:
            logger.debug("Rest countdown cancelled")
            raise
