"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

FIFO executor with bounded concurrency and post-request spacing.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..clock import Clock, SystemClock
from .contracts import QueuePolicy

T = TypeVar("T")

logger = logging.getLogger("gemguard.runtime.queue")


@dataclass(slots=True)
class QueueItem:
    """One pending operation and the future its caller awaits."""

    operation: Callable[[], Awaitable[Any]]
    future: asyncio.Future[Any]


class RequestQueue:
    """
    Serialize outbound calls through a fixed number of slots.

    Each slot takes items in arrival order. After an item finishes, the slot
    sleeps `request_delay_s` before it may take another, so throughput per
    slot is paced independently of any rate check done by the caller.
    Ordering across slots is not guaranteed.
    """

    def __init__(self, policy: QueuePolicy | None = None, *, clock: Clock | None = None) -> None:
        self._policy = policy or QueuePolicy()
        if self._policy.max_concurrent_requests < 1:
            raise ValueError("max_concurrent_requests must be >= 1")
        if self._policy.request_delay_s < 0:
            raise ValueError("request_delay_s must be >= 0")
        self._clock = clock or SystemClock()
        self._pending: deque[QueueItem] = deque()
        self._slots: set[asyncio.Task[None]] = set()
        self._active = 0
        self._closed = False

    @property
    def pending_count(self) -> int:
        """Number of operations waiting for a slot."""
        return len(self._pending)

    @property
    def active_count(self) -> int:
        """Number of operations currently executing."""
        return self._active

    async def enqueue(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Queue `operation` and wait for its result or error."""
        if self._closed:
            raise RuntimeError("RequestQueue is closed")
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._pending.append(QueueItem(operation=operation, future=future))
        self._spawn_slots()
        return await future

    def _spawn_slots(self) -> None:
        while self._pending and len(self._slots) < self._policy.max_concurrent_requests:
            self._slots.add(asyncio.create_task(self._run_slot()))

    async def _run_slot(self) -> None:
        try:
            while self._pending:
                item = self._pending.popleft()
                if item.future.done():
                    continue

                self._active += 1
                try:
                    result = await item.operation()
                except asyncio.CancelledError:
                    if not item.future.done():
                        item.future.cancel()
                    raise
                except Exception as error:
                    if not item.future.done():
                        item.future.set_exception(error)
                else:
                    if not item.future.done():
                        item.future.set_result(result)
                finally:
                    self._active -= 1

                await self._clock.sleep(self._policy.request_delay_s)
        finally:
            # No await between the final emptiness check and this discard,
            # so an enqueue can never observe a slot that is about to exit.
            self._slots.discard(asyncio.current_task())

    async def aclose(self) -> None:
        """Cancel slot timers and any operation that has not started."""
        self._closed = True
        while self._pending:
            item = self._pending.popleft()
            if not item.future.done():
                item.future.cancel()
        slots = list(self._slots)
        for task in slots:
            task.cancel()
        await asyncio.gather(*slots, return_exceptions=True)
        logger.debug("RequestQueue closed (%d slots cancelled)", len(slots))
