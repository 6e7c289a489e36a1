"""
Suspicious Object Detector - YOLO detections as ObjectObservation
"""

import logging
from typing import Any, List, Optional

import numpy as np

from ..exceptions import PerceptionError
from .port import ObjectObservation

logger = logging.getLogger(__name__)


def normalize_label(name: str) -> str:
    """COCO label to monitor class name: 'cell phone' -> 'cellPhone'"""
    words = name.strip().lower().split()
    if not words:
        return ""
    return words[0] + "".join(word.capitalize() for word in words[1:])


class YoloObjectDetector:
    """
    Runs a YOLO model over a frame and reports every detection.

    Filtering by suspicious class and per-class confidence is left to the
    monitor. The model's own confidence cut-off only trims noise.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        confidence: float = 0.25,
        model: Any = None
    ):
        """
        Initialize object detector.

        Args:
            model_path: Path to YOLO weights. If None, uses default from model_loader.
            confidence: Minimum confidence passed to the model.
            model: Preloaded model (skips lazy loading).
        """
        self.confidence = confidence
        self.model = model
        self._model_path = model_path

    def _ensure_model(self):
        """Lazy load YOLO model"""
        if self.model is not None:
            return

        try:
            from .model_loader import get_yolo_model
            self.model = get_yolo_model(self._model_path)
            logger.info("YOLO model loaded successfully")
        except Exception as e:
            raise PerceptionError(f"Failed to load YOLO model: {e}") from e

    def detect(self, frame: np.ndarray) -> List[ObjectObservation]:
        """
        Detect objects in a frame.

        Args:
            frame: BGR image

        Returns:
            One observation per detected box

        Raises:
            PerceptionError: if the model cannot be loaded or inference fails
        """
        self._ensure_model()

        try:
            results = self.model.predict(frame, conf=self.confidence, verbose=False)
        except Exception as e:
            raise PerceptionError(f"Object detection error: {e}") from e

        observations: List[ObjectObservation] = []
        for result in results:
            if result.boxes is None:
                continue

            for box in result.boxes:
                cls_id = int(box.cls[0])
                conf = float(box.conf[0])
                name = self.model.names.get(cls_id, f"class_{cls_id}")
                observations.append(ObjectObservation(normalize_label(name), conf))

        return observations
