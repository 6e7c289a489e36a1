"""
Camera Frame Source - Latest frame from an OpenCV capture device
"""

import logging
from typing import Optional, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class OpenCVFrameSource:
    """
    Frame source over cv2.VideoCapture.

    read() returns None until the device is open and delivering frames,
    which the scheduler treats as "not ready".
    """

    def __init__(self, source: Union[int, str] = 0, width: int = 640, height: int = 480):
        self.source = source
        self.width = width
        self.height = height
        self._capture: Optional[cv2.VideoCapture] = None

    def open(self) -> bool:
        if self._capture is None:
            self._capture = cv2.VideoCapture(self.source)
            self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        opened = bool(self._capture.isOpened())
        if not opened:
            logger.warning(f"Could not open video source {self.source!r}")
        return opened

    def read(self) -> Optional[np.ndarray]:
        if not self.open():
            return None

        ok, frame = self._capture.read()
        if not ok:
            return None
        return frame

    def release(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None
