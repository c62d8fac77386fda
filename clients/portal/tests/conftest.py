import heapq
import itertools
from collections.abc import Callable
from typing import Any

import pytest


class FakeHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Deterministic stand-in for the asyncio loop: time only moves on advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, FakeHandle, Callable[..., Any], tuple]] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle()
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), handle, callback, args))
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle, callback, args = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                callback(*args)
        self.now = target

    @property
    def pending(self) -> int:
        return sum(1 for entry in self._queue if not entry[2].cancelled)


@pytest.fixture
def loop() -> FakeLoop:
    return FakeLoop()
