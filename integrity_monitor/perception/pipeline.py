"""
Model Perception - PerceptionPort backed by local models
"""

import asyncio
from typing import Any, Optional, Sequence

from .face_estimator import FaceKeypointEstimator
from .object_detector import YoloObjectDetector
from .port import FaceObservation, ObjectObservation


class ModelPerception:
    """Runs the blocking face and object models in the default executor"""

    def __init__(
        self,
        face_estimator: Optional[FaceKeypointEstimator] = None,
        object_detector: Optional[YoloObjectDetector] = None,
    ):
        self.face_estimator = face_estimator or FaceKeypointEstimator()
        self.object_detector = object_detector or YoloObjectDetector()

    @classmethod
    def from_settings(cls, settings) -> "ModelPerception":
        return cls(
            FaceKeypointEstimator(max_faces=settings.MAX_FACES),
            YoloObjectDetector(settings.YOLO_MODEL_PATH, confidence=settings.YOLO_CONFIDENCE),
        )

    async def estimate_faces(self, frame: Any) -> Sequence[FaceObservation]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.face_estimator.estimate, frame)

    async def detect_objects(self, frame: Any) -> Sequence[ObjectObservation]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.object_detector.detect, frame)

    def close(self):
        self.face_estimator.close()
