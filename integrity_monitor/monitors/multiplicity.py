"""
Multi-Face Gate - Raises MultipleFacesDetected when more than one face is seen
"""

from ..clock import Clock
from ..events import EventKind
from .debounce import DebounceTimer, TimerState
from .sink import EventSink

IMMEDIATE = "immediate"
DEBOUNCED = "debounced"


class MultiFaceGate:
    """
    Two policies:
    - "immediate": raise on every sample with more than one face.
      Repeats are collapsed by the event log.
    - "debounced": raise once when more than one face has persisted for
      debounce_ms.

    Both return to Idle as soon as one face or none is seen.
    """

    def __init__(
        self,
        clock: Clock,
        raise_event: EventSink,
        policy: str = DEBOUNCED,
        debounce_ms: int = 2000,
    ):
        if policy not in (IMMEDIATE, DEBOUNCED):
            raise ValueError(f"Unknown multiple-faces policy: {policy}")
        self.policy = policy
        self._raise_event = raise_event
        self._immediate_state = TimerState.IDLE
        self.timer = DebounceTimer(
            "multiplicity",
            clock,
            debounce_ms / 1000.0,
            lambda: raise_event(EventKind.MULTIPLE_FACES_DETECTED),
        )

    @property
    def state(self) -> TimerState:
        if self.policy == IMMEDIATE:
            return self._immediate_state
        return self.timer.state

    def observe(self, face_count: int) -> None:
        crowded = face_count > 1

        if self.policy == DEBOUNCED:
            self.timer.update(crowded)
            return

        if crowded:
            self._immediate_state = TimerState.FIRED
            self._raise_event(EventKind.MULTIPLE_FACES_DETECTED)
        else:
            self._immediate_state = TimerState.IDLE

    def close(self) -> None:
        self.timer.reset()
        self._immediate_state = TimerState.IDLE
