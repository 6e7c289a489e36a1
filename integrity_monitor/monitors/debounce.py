"""
Debounce Timer - Idle / Pending / Fired state machine shared by the monitors
"""

import logging
from enum import Enum
from typing import Callable, Optional

from ..clock import Clock, TimerHandle

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    FIRED = "fired"


class DebounceTimer:
    """
    Raises once when a condition has held continuously for `delay` seconds.

    - Idle + condition true: arm a deferred check, go Pending.
    - Deferred check fires while Pending: call on_fire, go Fired.
    - Condition false in any state: cancel the check, go Idle.

    A Fired timer stays Fired while the condition holds and only re-arms
    after passing through Idle, so each continuous occurrence raises once.
    """

    def __init__(
        self,
        name: str,
        clock: Clock,
        delay: float,
        on_fire: Callable[[], None],
    ):
        self.name = name
        self.delay = delay
        self._clock = clock
        self._on_fire = on_fire
        self._state = TimerState.IDLE
        self._armed_at: Optional[float] = None
        self._handle: Optional[TimerHandle] = None

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def armed_at(self) -> Optional[float]:
        """Clock time the current Pending period started"""
        return self._armed_at

    def update(self, condition: bool) -> None:
        """Feed one observation of the triggering condition"""
        if not condition:
            self.reset()
            return

        if self._state == TimerState.IDLE:
            self._arm()

    def reset(self) -> None:
        """Cancel any deferred check and return to Idle"""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._state != TimerState.IDLE:
            logger.debug(f"{self.name} timer reset from {self._state.value}")
        self._state = TimerState.IDLE
        self._armed_at = None

    def _arm(self) -> None:
        self._state = TimerState.PENDING
        self._armed_at = self._clock.now()
        handle_box = []

        def _check():
            # Ignore a check that was superseded by reset() and a later re-arm
            if self._state != TimerState.PENDING or self._handle is not handle_box[0]:
                return
            self._handle = None
            self._state = TimerState.FIRED
            logger.debug(f"{self.name} timer fired after {self.delay:.1f}s")
            self._on_fire()

        self._handle = self._clock.call_later(self.delay, _check)
        handle_box.append(self._handle)
