"""
Attention Monitor - Raises UserLookingAway when the head stays turned

Head turn is estimated from the horizontal offset of the nose tip from
the midpoint between the eyes.
"""

import logging
from typing import Optional, Sequence

from ..clock import Clock
from ..events import EventKind
from ..perception.port import LEFT_EYE, NOSE_TIP, RIGHT_EYE, FaceObservation
from .debounce import DebounceTimer, TimerState
from .sink import EventSink

logger = logging.getLogger(__name__)

EXACTLY_ONE = "exactly_one"
AT_LEAST_ONE = "at_least_one"


def horizontal_distance(face: FaceObservation) -> Optional[float]:
    """
    noseTip.x - (leftEye.x + rightEye.x) / 2

    Returns:
        The offset, or None if a required keypoint is missing
    """
    nose = face.keypoint(NOSE_TIP)
    left = face.keypoint(LEFT_EYE)
    right = face.keypoint(RIGHT_EYE)
    if nose is None or left is None or right is None:
        return None
    eye_midpoint = (left.x + right.x) / 2
    return nose.x - eye_midpoint


class AttentionMonitor:
    """
    Debounced looking-away detector for the primary face.

    With the "exactly_one" policy the gaze signal is used only when a single
    face is in frame; "at_least_one" uses the first face whenever any is
    present. Samples that fail the face-count condition force Idle. Samples
    whose face lacks a required keypoint leave the state untouched.
    """

    def __init__(
        self,
        clock: Clock,
        threshold: float,
        debounce_ms: int,
        raise_event: EventSink,
        face_policy: str = EXACTLY_ONE,
    ):
        if face_policy not in (EXACTLY_ONE, AT_LEAST_ONE):
            raise ValueError(f"Unknown attention face policy: {face_policy}")
        self.threshold = threshold
        self.face_policy = face_policy
        self.timer = DebounceTimer(
            "attention",
            clock,
            debounce_ms / 1000.0,
            lambda: raise_event(EventKind.USER_LOOKING_AWAY),
        )

    @property
    def state(self) -> TimerState:
        return self.timer.state

    def _has_gaze_signal(self, face_count: int) -> bool:
        if self.face_policy == EXACTLY_ONE:
            return face_count == 1
        return face_count >= 1

    def observe(self, faces: Sequence[FaceObservation]) -> None:
        if not self._has_gaze_signal(len(faces)):
            self.timer.reset()
            return

        distance = horizontal_distance(faces[0])
        if distance is None:
            logger.debug("Face is missing gaze keypoints, sample ignored")
            return

        self.timer.update(abs(distance) > self.threshold)

    def close(self) -> None:
        self.timer.reset()
