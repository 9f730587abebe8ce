"""Rate-limited invoker - the single gate every LLM call passes through.

Provides:
- RateLimitedInvoker: bounds in-flight calls and queues the rest in FIFO order
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, TypeVar

from treedoc.config.defaults import INVOKER_MAX_CONCURRENT_CALLS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RateLimitedInvoker:
    """Concurrency gate for outbound calls.

    At most ``max_concurrent`` calls run at once. Extra calls wait in
    submission order and are released one per freed slot. A failing call
    frees its slot like any other; retries are the caller's business.

    Single event loop only: the counters are not guarded by a lock.
    """

    def __init__(self, max_concurrent: int = INVOKER_MAX_CONCURRENT_CALLS):
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        self.max_concurrent = max_concurrent
        self._in_flight = 0
        self._waiters: Deque[asyncio.Future] = deque()
        self.peak_in_flight = 0
        self.completed = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def waiting(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    async def schedule(self, call: Callable[[], Awaitable[T]]) -> T:
        """Run ``call()`` once a slot is free and return its result."""
        await self._acquire()
        try:
            return await call()
        finally:
            self.completed += 1
            self._release()

    async def _acquire(self) -> None:
        if self._in_flight < self.max_concurrent and not self._waiters:
            self._take_slot()
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug("Queued call (%d in flight, %d waiting)", self._in_flight, len(self._waiters))
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # A slot was handed over just before cancellation; pass it on
                self._release()
            else:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass
            raise

    def _take_slot(self) -> None:
        self._in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self._in_flight)

    def _release(self) -> None:
        # Hand the slot straight to the oldest live waiter; in_flight is unchanged
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._in_flight -= 1

    def __repr__(self) -> str:
        return (
            f"RateLimitedInvoker(max_concurrent={self.max_concurrent}, "
            f"in_flight={self._in_flight}, waiting={self.waiting})"
        )
