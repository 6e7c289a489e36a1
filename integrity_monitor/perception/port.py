"""
Perception Port - Observations consumed by the monitors

Face and object models live behind PerceptionPort so the monitors can be
driven by fake observations.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence, Tuple

NOSE_TIP = "noseTip"
LEFT_EYE = "leftEye"
RIGHT_EYE = "rightEye"

REQUIRED_KEYPOINTS = (NOSE_TIP, LEFT_EYE, RIGHT_EYE)


@dataclass(frozen=True)
class Keypoint:
    x: float
    y: float


@dataclass(frozen=True)
class FaceObservation:
    """
    Named 2-D keypoints of one face in one frame.

    Faces are anonymous per-frame detections; nothing links a face to
    the one seen in the previous sample.
    """

    keypoints: Mapping[str, Keypoint] = field(default_factory=dict)

    @classmethod
    def from_points(cls, points: Mapping[str, Tuple[float, float]]) -> "FaceObservation":
        """Build from {'noseTip': (x, y), ...}"""
        return cls({name: Keypoint(float(x), float(y)) for name, (x, y) in points.items()})

    def keypoint(self, name: str) -> Optional[Keypoint]:
        return self.keypoints.get(name)


@dataclass(frozen=True)
class ObjectObservation:
    """Classifier label and confidence for one detected object"""

    object_class: str
    score: float


@dataclass(frozen=True)
class Sample:
    """One scheduler tick's worth of perception results"""

    faces: Sequence[FaceObservation] = ()
    objects: Sequence[ObjectObservation] = ()

    @property
    def face_count(self) -> int:
        return len(self.faces)


class PerceptionPort(Protocol):
    """Face and object perception for a single frame. Either call may raise."""

    async def estimate_faces(self, frame: Any) -> Sequence[FaceObservation]: ...

    async def detect_objects(self, frame: Any) -> Sequence[ObjectObservation]: ...


class FrameSource(Protocol):
    """Current frame of the live feed, or None while the stream is not ready"""

    def read(self) -> Optional[Any]: ...
