"""
HandTracker — encapsulates all MediaPipe logic.
The rest of the application never imports mediapipe directly.
"""
from __future__ import annotations
from typing import Any, List, Optional

import cv2
import mediapipe as mp

from domain.models import Landmark


class HandTracker:
    """
    Processes a BGR frame and returns the landmarks of at most one hand,
    as raw normalised image coordinates ``(x, y, z)``. Feature
    normalisation happens later, in core.features.

    Parameters
    ----------
    min_detection_confidence : float
    min_tracking_confidence : float
    draw : bool
        Draw the detected skeleton onto the frame (mutates it in place).
    """

    def __init__(
        self,
        min_detection_confidence: float = 0.6,
        min_tracking_confidence: float = 0.6,
        draw: bool = True,
    ) -> None:
        self._mp_hands = mp.solutions.hands
        self._mp_draw  = mp.solutions.drawing_utils
        self._draw     = draw
        self._hands    = self._mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=1,
            model_complexity=1,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    # ------------------------------------------------------------------
    def process(self, frame: Any) -> Optional[List[Landmark]]:
        """
        Parameters
        ----------
        frame : np.ndarray
            BGR frame from OpenCV.

        Returns
        -------
        list of (x, y, z) or None
            21 landmarks of the tracked hand, None when no hand is visible.
        """
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self._hands.process(rgb)

        if not results.multi_hand_landmarks:
            return None

        hand_landmarks = results.multi_hand_landmarks[0]
        if self._draw:
            self._mp_draw.draw_landmarks(
                frame, hand_landmarks, self._mp_hands.HAND_CONNECTIONS
            )
        return [(lm.x, lm.y, lm.z) for lm in hand_landmarks.landmark]

    def release(self) -> None:
        self._hands.close()
