"""
Model Loader - Lazy loading and caching of perception models
"""

import logging
import os
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)

# Default model paths (relative to this file's directory)
MODELS_DIR = os.path.join(os.path.dirname(__file__), "weights")

# COCO-pretrained fallback that knows "cell phone" and "book"
DEFAULT_YOLO_WEIGHTS = "yolov8n.pt"


@lru_cache(maxsize=4)
def get_yolo_model(model_path: Optional[str] = None):
    """
    Get YOLO model for suspicious object detection.

    Args:
        model_path: Explicit weights file. Falls back to weights/ and then
                    to the COCO-pretrained yolov8n.

    Returns:
        YOLO model instance
    """
    from ultralytics import YOLO

    possible_paths = [
        model_path,
        os.path.join(MODELS_DIR, DEFAULT_YOLO_WEIGHTS),
    ]

    for path in possible_paths:
        if path and os.path.exists(path):
            logger.info(f"Loading YOLO model from: {path}")
            return YOLO(path)

    logger.warning(f"Custom YOLO model not found, using {DEFAULT_YOLO_WEIGHTS}")
    return YOLO(DEFAULT_YOLO_WEIGHTS)


def get_face_mesh(max_faces: int = 4):
    """
    Create a MediaPipe Face Mesh instance.

    Face Mesh keeps tracking state between frames and is closed by its
    owner, so every caller gets its own instance.

    Args:
        max_faces: Maximum number of faces reported per frame

    Returns:
        mediapipe FaceMesh instance
    """
    import mediapipe as mp

    face_mesh = mp.solutions.face_mesh.FaceMesh(
        static_image_mode=False,
        max_num_faces=max_faces,
        refine_landmarks=False,
        min_detection_confidence=0.5,
        min_tracking_confidence=0.5
    )

    logger.info(f"MediaPipe Face Mesh initialized (max_faces={max_faces})")
    return face_mesh


def check_models() -> dict:
    """
    Check which perception backends are importable.

    Returns:
        Dict with model status
    """
    status = {
        "ultralytics": False,
        "mediapipe": False,
        "yolo_weights": os.path.exists(os.path.join(MODELS_DIR, DEFAULT_YOLO_WEIGHTS)),
    }

    try:
        import ultralytics  # noqa: F401
        status["ultralytics"] = True
    except ImportError:
        pass

    try:
        import mediapipe  # noqa: F401
        status["mediapipe"] = True
    except ImportError:
        pass

    return status
