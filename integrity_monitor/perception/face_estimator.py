"""
Face Keypoint Estimator - MediaPipe Face Mesh landmarks as FaceObservation
"""

import logging
from typing import Any, List, Optional

import cv2
import numpy as np

from ..exceptions import PerceptionError
from .port import LEFT_EYE, NOSE_TIP, RIGHT_EYE, FaceObservation, Keypoint

logger = logging.getLogger(__name__)

# MediaPipe Face Mesh landmark indices
NOSE_TIP_INDEX = 1
LEFT_EYE_INNER_CORNER = 362
LEFT_EYE_OUTER_CORNER = 263
RIGHT_EYE_INNER_CORNER = 133
RIGHT_EYE_OUTER_CORNER = 33


class FaceKeypointEstimator:
    """
    Reports noseTip, leftEye and rightEye for every face in a frame.

    Eye keypoints are the midpoints of the eye corners. Coordinates are in
    pixels so the looking-away threshold is resolution-dependent, as with
    any pixel threshold.
    """

    def __init__(self, max_faces: int = 4, face_mesh: Any = None):
        self.max_faces = max_faces
        self.face_mesh = face_mesh

    def _ensure_model(self):
        if self.face_mesh is not None:
            return

        try:
            from .model_loader import get_face_mesh
            self.face_mesh = get_face_mesh(self.max_faces)
        except Exception as e:
            raise PerceptionError(f"Failed to load Face Mesh: {e}") from e

    def estimate(self, frame: np.ndarray) -> List[FaceObservation]:
        """
        Estimate face keypoints.

        Args:
            frame: BGR image

        Returns:
            One observation per face (empty when nobody is in frame)
        """
        self._ensure_model()

        try:
            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            results = self.face_mesh.process(rgb_frame)
        except Exception as e:
            raise PerceptionError(f"Face estimation error: {e}") from e

        if not results.multi_face_landmarks:
            return []

        h, w = frame.shape[:2]
        return [self._to_observation(face.landmark, w, h) for face in results.multi_face_landmarks]

    @staticmethod
    def _to_observation(landmarks, width: int, height: int) -> FaceObservation:
        def point(index: int) -> Keypoint:
            lm = landmarks[index]
            return Keypoint(lm.x * width, lm.y * height)

        def midpoint(a: int, b: int) -> Keypoint:
            pa, pb = point(a), point(b)
            return Keypoint((pa.x + pb.x) / 2, (pa.y + pb.y) / 2)

        return FaceObservation({
            NOSE_TIP: point(NOSE_TIP_INDEX),
            LEFT_EYE: midpoint(LEFT_EYE_INNER_CORNER, LEFT_EYE_OUTER_CORNER),
            RIGHT_EYE: midpoint(RIGHT_EYE_INNER_CORNER, RIGHT_EYE_OUTER_CORNER),
        })

    def close(self):
        """Release resources"""
        if self.face_mesh is not None:
            self.face_mesh.close()
            self.face_mesh = None
