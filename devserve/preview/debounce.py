import asyncio
import inspect
import logging
from typing import Callable, Awaitable, Set, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[None]]]

class Debouncer:
    """Coalesces a burst of triggers into one delayed callback.

    The first trigger schedules ``callback`` to run ``delay`` seconds later.
    Triggers arriving while that call is pending are dropped and do not push
    the call back. Once the callback has started, the next trigger begins a
    new cycle.
    """

    def __init__(self, delay: float, callback: Callback):
        self.delay = delay
        self.callback = callback
        self.pending = False
        self._tasks: Set[asyncio.Task] = set()

    def __call__(self):
        if self.pending:
            return
        self.pending = True
        task = asyncio.get_running_loop().create_task(self._fire_later())
        # Keep a reference until done, the loop only holds weak ones
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fire_later(self):
        await asyncio.sleep(self.delay)
        self.pending = False
        try:
            result = self.callback()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Debounced callback failed")

    async def drain(self):
        """Wait for any scheduled callbacks to finish"""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

def debounce(delay: float, callback: Callback) -> Debouncer:
    """Wrap ``callback`` so bursts of calls within ``delay`` fire it once"""
    return Debouncer(delay, callback)
