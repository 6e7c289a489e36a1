"""
Presence Monitor - Raises UserAbsent after a continuous absence of faces
"""

from ..clock import Clock
from ..events import EventKind
from .debounce import DebounceTimer, TimerState
from .sink import EventSink


class PresenceMonitor:
    """
    Tracks whether the candidate has been out of frame long enough.

    Only zero vs non-zero faces matters. Any sample with a face returns
    the timer to Idle, so a new absence starts the full threshold again.
    """

    def __init__(self, clock: Clock, threshold_ms: int, raise_event: EventSink):
        self.timer = DebounceTimer(
            "presence",
            clock,
            threshold_ms / 1000.0,
            lambda: raise_event(EventKind.USER_ABSENT),
        )

    @property
    def state(self) -> TimerState:
        return self.timer.state

    def observe(self, face_count: int) -> None:
        self.timer.update(face_count == 0)

    def close(self) -> None:
        self.timer.reset()
