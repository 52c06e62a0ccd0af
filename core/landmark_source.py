"""
CameraLandmarkSource — the frame source used by the desktop runner:
Camera frames in, one hand's landmarks out.
"""
from __future__ import annotations
import threading
from typing import Any, List, Optional

from core.camera import Camera
from core.hand_tracker import HandTracker
from domain.models import Landmark


class CameraLandmarkSource:
    """
    Satisfies the Session frame-source interface.

    The last captured (annotated) frame is kept for rendering; read it
    with ``latest_frame()`` from the UI thread.
    """

    def __init__(self, camera: Camera, tracker: HandTracker) -> None:
        self._camera = camera
        self._tracker = tracker
        self._lock = threading.Lock()
        self._latest: Optional[Any] = None
        self._cancelled = threading.Event()

    def is_ready(self) -> bool:
        return self._camera.is_ready()

    def read(self) -> Optional[List[Landmark]]:
        """
        Landmarks of the next frame. Returns None if the request was
        cancelled while waiting for the camera.

        Raises
        ------
        RuntimeError
            The camera delivered no frame.
        """
        self._cancelled.clear()
        frame = self._camera.read()
        if self._cancelled.is_set():
            return None
        if frame is None:
            raise RuntimeError("camera returned no frame")
        landmarks = self._tracker.process(frame)
        with self._lock:
            self._latest = frame
        return landmarks

    def cancel(self) -> None:
        self._cancelled.set()

    def latest_frame(self) -> Optional[Any]:
        with self._lock:
            return None if self._latest is None else self._latest.copy()

    def close(self) -> None:
        self.cancel()
        self._camera.release()
        self._tracker.release()
