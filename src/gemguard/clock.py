"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Injectable time sources used by every timed behavior in the runtime.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic time source plus a matching sleeper."""

    def now(self) -> float: ...

    async def sleep(self, delay_s: float) -> None: ...


class SystemClock:
    """Wall-clock implementation backed by `time.monotonic`/`asyncio.sleep`."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, delay_s: float) -> None:
        await asyncio.sleep(max(0.0, delay_s))


class ManualClock:
    """
    Virtual clock for tests.

    `sleep` advances virtual time immediately and yields once to the event
    loop, so timed code runs without real delays. Every requested delay is
    kept in `sleeps` for assertions.
    """

    def __init__(self, start_s: float = 0.0) -> None:
        self._now = start_s
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    def advance(self, delta_s: float) -> None:
        if delta_s < 0:
            raise ValueError("delta_s must be >= 0")
        self._now += delta_s

    async def sleep(self, delay_s: float) -> None:
        delay_s = max(0.0, delay_s)
        self.sleeps.append(delay_s)
        self._now += delay_s
        await asyncio.sleep(0)
