"""
Pluggable clocks.

The analytics layer reads time through a Timebase so session grouping and
call timing can be driven deterministically in tests.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from time import monotonic
from typing import List, Tuple


class Timebase(ABC):
    @abstractmethod
    def now(self) -> float:
        """Seconds, on this clock's own scale"""

    @abstractmethod
    async def sleep(self, duration: float):
        pass

    def now_ms(self) -> int:
        return int(self.now() * 1000)


class WallClock(Timebase):
    """UTC epoch seconds"""

    def now(self) -> float:
        return datetime.now(timezone.utc).timestamp()

    async def sleep(self, duration: float):
        await asyncio.sleep(duration)


class MonotonicClock(Timebase):
    """For measuring durations; unrelated to calendar time"""

    def now(self) -> float:
        return monotonic()

    async def sleep(self, duration: float):
        await asyncio.sleep(duration)


class DictatedClock(Timebase):
    """
    Clock that only moves when set() or advance() is called.

    Sleepers are parked on futures and released once the clock reaches their
    deadline.
    """

    def __init__(self, initial: float = 0.0):
        self.value = initial
        self._sleepers: List[Tuple[float, asyncio.Future]] = []

    def now(self) -> float:
        return self.value

    async def sleep(self, duration: float):
        deadline = self.value + duration
        if deadline <= self.value:
            await asyncio.sleep(0)
            return
        waiter = asyncio.get_running_loop().create_future()
        self._sleepers.append((deadline, waiter))
        await waiter

    def set(self, val: float):
        self.value = val
        pending = []
        for deadline, waiter in self._sleepers:
            if waiter.done():
                continue
            if deadline <= val:
                waiter.set_result(None)
            else:
                pending.append((deadline, waiter))
        self._sleepers = pending

    def advance(self, seconds: float):
        self.set(self.value + seconds)
