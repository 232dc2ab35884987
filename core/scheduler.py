import asyncio
import logging

logger = logging.getLogger(__name__)


class AsyncioScheduler:
    """Schedule one-shot deferred callbacks on the running event loop.

    ``call_later`` must be invoked from a callback running on that loop; it
    returns the loop's ``TimerHandle`` so the caller can cancel it.
    """

    def __init__(self, loop=None):
        self.loop = loop

    def call_later(self, delay, callback, *args):
        loop = self.loop or asyncio.get_running_loop()
        logger.debug(f"Scheduling {getattr(callback, '__name__', callback)} in {delay}s")
        return loop.call_later(delay, callback, *args)
