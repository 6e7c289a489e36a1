"""
Frame Readiness Checker - Decides whether a frame is worth sending to perception
"""

import logging
from typing import Any, Dict

import numpy as np

logger = logging.getLogger(__name__)


def check_frame_ready(frame: Any, min_brightness: float = 5.0) -> Dict[str, Any]:
    """
    Check that the stream has produced a usable frame.

    Image arrays are rejected when empty or almost completely black
    (camera still warming up). Any other frame object is opaque to the
    monitor and counts as ready.

    Args:
        frame: Image array (H, W[, C]) or an opaque frame handle
        min_brightness: Minimum mean pixel value (0-255)

    Returns:
        Dict with:
            - is_ready: bool
            - issues: List of readiness issues
            - brightness: float, or None for opaque frames
    """
    if frame is None:
        return {"is_ready": False, "issues": ["no_frame"], "brightness": None}

    if not isinstance(frame, np.ndarray):
        return {"is_ready": True, "issues": [], "brightness": None}

    if frame.size == 0:
        return {"is_ready": False, "issues": ["empty_frame"], "brightness": 0.0}

    brightness = float(np.mean(frame))
    issues = []
    if brightness < min_brightness:
        issues.append("too_dark")

    return {
        "is_ready": len(issues) == 0,
        "issues": issues,
        "brightness": brightness
    }
