"""Perception port and model adapters"""

from .port import (
    FaceObservation,
    FrameSource,
    Keypoint,
    ObjectObservation,
    PerceptionPort,
    Sample,
)
from .frame_quality import check_frame_ready

__all__ = [
    "FaceObservation",
    "FrameSource",
    "Keypoint",
    "ObjectObservation",
    "PerceptionPort",
    "Sample",
    "check_frame_ready",
]
