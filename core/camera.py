"""
Camera — OpenCV VideoCapture for the live runner.

Frames come out at most ``fps_limit`` times per second; readiness is
reported separately so the session loop can wait for the device to warm up
instead of counting empty reads as failures.
"""
from __future__ import annotations
import logging
import time
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class Camera:
    """
    Parameters
    ----------
    device : int
        Camera index (0 = default webcam).
    fps_limit : int
        Maximum frames per second handed to the tracker.
    width, height : int, optional
        Requested capture resolution. The driver may pick another one;
        ``frame_size`` reports what it actually delivers.
    """

    def __init__(
        self,
        device: int = 0,
        fps_limit: int = 30,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        self._device = device
        self._cap = cv2.VideoCapture(device)
        if not self._cap.isOpened():
            raise RuntimeError(f"Cannot open camera device {device}")

        if width:
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        if height:
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        self._min_interval = 1.0 / fps_limit if fps_limit > 0 else 0.0
        self._last_read_at = float("-inf")
        logger.info("Camera %s opened at %dx%d", device, *self.frame_size)

    # ------------------------------------------------------------------
    @property
    def frame_size(self) -> Tuple[int, int]:
        """(width, height) reported by the driver, (0, 0) until known."""
        return (
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    def is_ready(self) -> bool:
        """True once the device is open and reports a non-empty frame size."""
        if not self._cap.isOpened():
            return False
        width, height = self.frame_size
        return width > 0 and height > 0

    def read(self) -> Optional[np.ndarray]:
        """
        Next BGR frame, or None when the driver returned nothing.
        Sleeps first if the previous frame was less than one FPS interval ago.
        """
        wait = self._last_read_at + self._min_interval - time.monotonic()
        if wait > 0:
            time.sleep(wait)
        self._last_read_at = time.monotonic()

        ok, frame = self._cap.read()
        if not ok:
            logger.debug("Camera %s returned no frame", self._device)
            return None
        return frame

    def release(self) -> None:
        self._cap.release()

    def __enter__(self) -> "Camera":
        return self

    def __exit__(self, *_) -> None:
        self.release()
