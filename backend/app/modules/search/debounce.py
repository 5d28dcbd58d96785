import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Set
import logging

logger = logging.getLogger(__name__)


@dataclass
class ScheduledCall:
    """A pending timer together with the handle that cancels it"""
    handle: asyncio.TimerHandle
    fired: bool = False

    def cancel(self):
        if not self.fired:
            self.handle.cancel()


@dataclass
class Debouncer:
    """
    Runs a coroutine function once input has been quiet for `delay` seconds.

    At most one timer is pending at a time: scheduling again cancels the
    pending timer and starts a new one. Coroutines already started are
    tracked so close() can stop them too.
    """
    delay: float
    _pending: Optional[ScheduledCall] = field(default=None, init=False)
    _running: Set[asyncio.Task] = field(default_factory=set, init=False)
    _closed: bool = field(default=False, init=False)

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.fired

    def schedule(self, func: Callable[..., Awaitable[Any]], *args: Any) -> None:
        if self._closed:
            logger.debug("Ignoring schedule on closed debouncer")
            return

        self.cancel()
        loop = asyncio.get_running_loop()
        call = ScheduledCall(handle=loop.call_later(self.delay, self._fire, func, args))
        self._pending = call

    def _fire(self, func: Callable[..., Awaitable[Any]], args: tuple) -> None:
        if self._pending is not None:
            self._pending.fired = True
            self._pending = None

        task = asyncio.ensure_future(func(*args))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    def cancel(self) -> None:
        """Drop the pending timer, leaving started work alone"""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def close(self) -> None:
        """Drop the pending timer and cancel any started work"""
        self.cancel()
        for task in list(self._running):
            task.cancel()
        self._running.clear()
        self._closed = True

    async def wait_idle(self) -> None:
        """Wait for started work to finish (used by callers that need a settled state)"""
        if self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)
