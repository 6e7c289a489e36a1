"""
Clocks - Time source and deferred-check primitive for the monitors

LoopClock schedules deferred checks on the running asyncio loop.
VirtualClock is driven by hand so debounce logic can be exercised
without real waits.
"""

import asyncio
import heapq
import itertools
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    """Time source shared by a session's monitors"""

    def now(self) -> float:
        """Monotonic time in seconds"""
        ...

    def wall_time(self) -> datetime:
        """Timezone-aware wall-clock time for event timestamps"""
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds, unless cancelled"""
        ...


class LoopClock:
    """Clock backed by an asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._loop.time()

    def wall_time(self) -> datetime:
        return datetime.now(timezone.utc)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._loop.call_later(delay, callback)


class _VirtualHandle:
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """
    Manually advanced clock.

    Deferred callbacks fire in due-time order (ties in scheduling order)
    when advance() moves time past their due time.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._start = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._now = 0.0
        self._queue: List[Tuple[float, int, _VirtualHandle, Callable[[], None]]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def wall_time(self) -> datetime:
        return self._start + timedelta(seconds=self._now)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _VirtualHandle()
        heapq.heappush(self._queue, (self._now + max(0.0, delay), next(self._counter), handle, callback))
        return handle

    def advance(self, seconds: float) -> None:
        """Move time forward, firing every callback that falls due"""
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            callback()
        self._now = target

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks not yet fired or cancelled"""
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)
